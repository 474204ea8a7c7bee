from .conversion_service import ConversionService
from .currency_service import CurrencyService
from .rate_aggregator import RateAggregator, select_best_rate
from .rate_resolver import RateResolver
from .refresh_scheduler import RefreshScheduler

__all__ = [
    'ConversionService',
    'CurrencyService',
    'RateAggregator',
    'RateResolver',
    'RefreshScheduler',
    'select_best_rate',
]
