"""Domain modules whose elements are tracked by the event log."""
