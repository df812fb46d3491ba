from .attempt_histogram_service import AttemptHistogramService
from .card_scheduler import CardScheduler, SchedulerConfig, clamp_ease
from .due_forecast_service import DueForecast, DueForecastService

__all__ = [
    "AttemptHistogramService",
    "CardScheduler",
    "DueForecast",
    "DueForecastService",
    "SchedulerConfig",
    "clamp_ease",
]
