"""Infrastructure API module."""
from .riot_client import RiotMatchClient
from .rate_limiter import RateLimiter, RateWindow
from .retry import RetryPolicy

__all__ = [
    'RiotMatchClient',
    'RateLimiter',
    'RateWindow',
    'RetryPolicy',
]
