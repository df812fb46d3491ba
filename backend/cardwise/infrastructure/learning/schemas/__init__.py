"""Learning context schemas."""
