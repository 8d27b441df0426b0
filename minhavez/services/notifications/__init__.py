"""Customer-facing alerts when a queue entry is called."""
