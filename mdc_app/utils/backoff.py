"""Exponential backoff schedule for resend passes."""

from dataclasses import dataclass

from ..config.defaults import ResendParams


@dataclass(frozen=True)
class BackoffPolicy:
    """Delay schedule between resend passes."""
    initial_delay_s: float = 0.1
    multiplier: float = 2.0
    max_delay_s: float = 5.0

    @classmethod
    def from_params(cls, params: ResendParams) -> "BackoffPolicy":
        return cls(
            initial_delay_s=params.initial_delay_s,
            multiplier=params.multiplier,
            max_delay_s=params.max_delay_s,
        )

    def delay_before_pass(self, pass_number: int) -> float:
        """
        Seconds to wait before resend pass ``pass_number`` (1-based).

        The first pass runs immediately; later passes back off exponentially,
        capped at max_delay_s.
        """
        if pass_number <= 1:
            return 0.0
        delay = self.initial_delay_s * self.multiplier ** (pass_number - 2)
        return min(delay, self.max_delay_s)
