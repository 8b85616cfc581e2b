"""Exceptions raised by the trainer core."""


class TrainerError(Exception):
    """Base class for trainer errors."""
    pass


class StrategyLoadError(TrainerError):
    """Raised when the strategy table cannot be loaded.

    Fatal for the session: without a table no evaluation is possible.
    """
    pass
