from dataclasses import dataclass

from docuextract.config.settings import Settings


@dataclass(frozen=True)
class BackoffPolicy:
    """Bounded exponential backoff for rate-limited extraction requests."""

    max_retries: int = 3
    base_delay_seconds: float = 5.0
    max_delay_seconds: float = 60.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "BackoffPolicy":
        return cls(
            max_retries=max(0, settings.rate_limit_max_retries),
            base_delay_seconds=max(0.0, settings.rate_limit_backoff_seconds),
            max_delay_seconds=max(0.0, settings.rate_limit_max_backoff_seconds),
        )

    def delay_for(self, attempt: int) -> float:
        """Delay before resume number ``attempt`` (0-based)."""
        return min(self.base_delay_seconds * (2**attempt), self.max_delay_seconds)
