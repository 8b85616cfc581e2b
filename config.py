"""
Configuration settings for the RFI trainer.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from src.trainer.selector import SelectorConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Data Sources
    # ========================================
    strategy_path: Path = Field(
        default=Path("data/rfi_9max_ante_stack50_RFI_UTG_to_SB_actions.json"),
        description="Strategy table JSON ({meta, sizes, strategies})",
    )
    database_path: Path = Field(
        default=Path.home() / ".rfi_trainer" / "state.db",
        description="SQLite file holding repetition state, attempts and settings",
    )

    # ========================================
    # Session Defaults
    # ========================================
    default_mode: Literal["boundary", "random", "review"] = Field(
        default="boundary",
        description="Selection mode used when no settings have been stored",
    )
    default_question_count: int | None = Field(
        default=None,
        description="Questions per session (None for unlimited)",
    )

    # ========================================
    # Selection Weights
    # ========================================
    due_review_weight: float = Field(
        default=0.2,
        description="Share of draws routed to the due-review tier",
    )
    boundary_cutoff: float = Field(
        default=0.9,
        description="Draws below this (and above the due share) go to the boundary tier",
    )
    boundary_slice_fraction: float = Field(
        default=0.2,
        description="Fraction of the sorted pool kept as boundary candidates",
    )
    boundary_min_slice: int = Field(
        default=20,
        description="Minimum boundary slice size",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Helper Methods
    # ========================================
    def get_selector_config(self) -> SelectorConfig:
        """Build the selector configuration from these settings."""
        from src.trainer.selector import SelectorConfig

        return SelectorConfig(
            due_review_weight=self.due_review_weight,
            boundary_cutoff=self.boundary_cutoff,
            boundary_slice_fraction=self.boundary_slice_fraction,
            boundary_min_slice=self.boundary_min_slice,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
