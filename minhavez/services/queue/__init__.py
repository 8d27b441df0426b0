"""Live walk-in queue: rank/wait recalculation, status transitions, availability."""
