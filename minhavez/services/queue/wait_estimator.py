"""Rank and wait-time arithmetic shared by every caller that shows a wait."""
from dataclasses import dataclass

from minhavez.config.settings import settings


@dataclass(frozen=True)
class WaitEstimator:
    """
    Linear wait estimate: each waiting customer ahead adds a fixed number of minutes.

    The public summary, the join endpoint and the live recalculator all take
    an instance of this class so the per-customer constant lives in one place.
    """
    minutes_per_customer: int = 15

    def __post_init__(self):
        if self.minutes_per_customer < 0:
            raise ValueError("minutes_per_customer must be non-negative")

    def rank(self, people_ahead: int) -> int:
        """1-based rank given how many waiting entries are ahead."""
        self._check(people_ahead)
        return people_ahead + 1

    def estimate(self, people_ahead: int) -> int:
        """Estimated wait in minutes."""
        self._check(people_ahead)
        return people_ahead * self.minutes_per_customer

    @staticmethod
    def _check(count: int) -> None:
        if count < 0:
            raise ValueError("count of people ahead cannot be negative")


def get_wait_estimator() -> WaitEstimator:
    """FastAPI dependency / default factory bound to settings."""
    return WaitEstimator(minutes_per_customer=settings.QUEUE_MINUTES_PER_CUSTOMER)
