"""Timing configuration for the optimistic loading controller."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SkeletonTiming:
    """Delays, in seconds, used to gate the loading skeleton.

    Attributes:
        min_delay: How long a non-cached load must last before the
            skeleton appears.
        fast_threshold: Loads shorter than this hide the skeleton at once.
        hide_grace: Extra time a visible skeleton stays up after loading
            ends, so it does not vanish abruptly.
    """

    min_delay: float = 0.150
    fast_threshold: float = 0.100
    hide_grace: float = 0.050

    def __post_init__(self) -> None:
        """Reject negative delays."""
        for name in ("min_delay", "fast_threshold", "hide_grace"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
