"""
Learning bounded context - Domain layer.

Spaced-repetition study engine:
- ProgressRecord: per (user, card) review state
- SessionAttempt: append-only log of answered cards
- QuotaReservation: outcome of reserving metered AI usage

Domain services:
- CardScheduler: the review state machine
- DueForecastService: groups cards by when they fall due
- AttemptHistogramService: per-day accuracy aggregation
"""
