"""Tests for rank and wait arithmetic."""
import pytest

from minhavez.services.queue.wait_estimator import WaitEstimator, get_wait_estimator


class TestWaitEstimator:
    def test_rank_is_people_ahead_plus_one(self):
        estimator = WaitEstimator(15)
        assert estimator.rank(0) == 1
        assert estimator.rank(2) == 3

    def test_estimate_is_linear(self):
        estimator = WaitEstimator(15)
        assert estimator.estimate(0) == 0
        assert estimator.estimate(2) == 30

    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            WaitEstimator(15).estimate(-1)

    def test_negative_rate_rejected(self):
        with pytest.raises(ValueError):
            WaitEstimator(-5)

    def test_default_uses_configured_minutes(self):
        from minhavez.config.settings import settings

        assert get_wait_estimator().minutes_per_customer == settings.QUEUE_MINUTES_PER_CUSTOMER
