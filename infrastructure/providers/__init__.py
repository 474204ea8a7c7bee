from .base import ExchangeRateProvider, HTTPRateProvider
from .currencyapi import CurrencyAPIProvider
from .fixerio import FixerIOProvider
from .mock import MockRateProvider
from .openexchange import OpenExchangeProvider
from .registry import ProviderEntry, ProviderRegistry
from .retry import RetryPolicy, call_with_retry

__all__ = [
    'ExchangeRateProvider',
    'HTTPRateProvider',
    'CurrencyAPIProvider',
    'FixerIOProvider',
    'MockRateProvider',
    'OpenExchangeProvider',
    'ProviderEntry',
    'ProviderRegistry',
    'RetryPolicy',
    'call_with_retry',
]
