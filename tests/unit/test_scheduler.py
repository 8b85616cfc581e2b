"""
Unit tests for the repetition update rule and RepetitionStore.
"""

from src.trainer.scheduler import (
    ONE_DAY_MS,
    RepetitionConfig,
    RepetitionScheduler,
    RepetitionStore,
)
from src.trainer.state_store import RepetitionRecord

T = 1_700_000_000_000


class TestUpdateRule:
    def setup_method(self):
        self.scheduler = RepetitionScheduler()

    def test_incorrect_resets(self):
        record = RepetitionRecord("RFI_BTN", "AA", streak=4, interval_ms=8 * ONE_DAY_MS)
        updated = self.scheduler.calculate_next_review(record, False, T)

        assert updated.streak == 0
        assert updated.interval_ms == 60_000
        assert updated.next_review_at == T + 60_000

    def test_first_correct_is_ten_minutes(self):
        updated = self.scheduler.calculate_next_review(RepetitionRecord("RFI_BTN", "AA"), True, T)
        assert updated.streak == 1
        assert updated.interval_ms == 600_000

    def test_doubles_from_third_correct(self):
        record = RepetitionRecord("RFI_BTN", "AA", streak=2, interval_ms=ONE_DAY_MS)
        updated = self.scheduler.calculate_next_review(record, True, T)

        assert updated.streak == 3
        assert updated.interval_ms == 2 * ONE_DAY_MS

    def test_input_record_untouched(self):
        record = RepetitionRecord("RFI_BTN", "AA")
        self.scheduler.calculate_next_review(record, True, T)
        assert record.streak == 0

    def test_easiness_factor_is_carried_not_used(self):
        record = RepetitionRecord("RFI_BTN", "AA", streak=2, interval_ms=ONE_DAY_MS, easiness_factor=1.3)
        updated = self.scheduler.calculate_next_review(record, True, T)

        assert updated.easiness_factor == 1.3
        assert updated.interval_ms == 2 * ONE_DAY_MS

    def test_custom_config(self):
        scheduler = RepetitionScheduler(RepetitionConfig(incorrect_interval_ms=5_000))
        updated = scheduler.calculate_next_review(RepetitionRecord("RFI_BTN", "AA"), False, T)
        assert updated.interval_ms == 5_000


class TestRepetitionStore:
    def test_three_correct_answers_progression(self, state_store):
        repetitions = RepetitionStore(state_store)

        intervals = [
            repetitions.record_answer("RFI_BTN", "AA", True, T + i).interval_ms
            for i in range(4)
        ]

        assert intervals == [600_000, 86_400_000, 172_800_000, 345_600_000]

    def test_repeated_incorrect_is_stable(self, state_store):
        repetitions = RepetitionStore(state_store)

        first = repetitions.record_answer("RFI_CO", "A5o", False, T)
        second = repetitions.record_answer("RFI_CO", "A5o", False, T + 5_000)

        assert (first.streak, first.interval_ms) == (0, 60_000)
        assert (second.streak, second.interval_ms) == (0, 60_000)
        assert second.next_review_at == T + 5_000 + 60_000

    def test_incorrect_after_streak_restarts_progression(self, state_store):
        repetitions = RepetitionStore(state_store)
        for i in range(3):
            repetitions.record_answer("RFI_BTN", "K9o", True, T + i)

        repetitions.record_answer("RFI_BTN", "K9o", False, T + 10)
        again = repetitions.record_answer("RFI_BTN", "K9o", True, T + 20)

        assert again.streak == 1
        assert again.interval_ms == 600_000

    def test_created_on_first_answer(self, state_store):
        repetitions = RepetitionStore(state_store)
        assert repetitions.get_record("RFI_BTN", "98s") is None

        repetitions.record_answer("RFI_BTN", "98s", True, T)

        stored = repetitions.get_record("RFI_BTN", "98s")
        assert stored.streak == 1
        assert stored.key == "RFI_BTN_98s"

    def test_due_boundary(self, state_store):
        repetitions = RepetitionStore(state_store)
        repetitions.record_answer("RFI_BTN", "AA", False, T)

        assert repetitions.due_items(T + 59_999) == []
        due = repetitions.due_items(T + 60_000)
        assert [(r.position, r.hand) for r in due] == [("RFI_BTN", "AA")]

    def test_due_items_exact_set(self, state_store):
        repetitions = RepetitionStore(state_store)
        repetitions.record_answer("RFI_BTN", "AA", False, T)  # due at T+1m
        repetitions.record_answer("RFI_BTN", "AKs", True, T)  # due at T+10m
        repetitions.record_answer("RFI_CO", "72o", False, T + 120_000)  # due at T+3m

        due = {r.key for r in repetitions.due_items(T + 180_000)}
        assert due == {"RFI_BTN_AA", "RFI_CO_72o"}

    def test_seen_items_include_future_records(self, state_store):
        repetitions = RepetitionStore(state_store)
        repetitions.record_answer("RFI_BTN", "AA", True, T)

        assert repetitions.due_items(T) == []
        assert [r.key for r in repetitions.seen_items()] == ["RFI_BTN_AA"]

    def test_answer_is_visible_to_next_due_query(self, state_store):
        repetitions = RepetitionStore(state_store)
        repetitions.record_answer("RFI_BTN", "AA", False, T)
        repetitions.record_answer("RFI_BTN", "AA", True, T + 60_000)

        assert repetitions.due_items(T + 60_000) == []
