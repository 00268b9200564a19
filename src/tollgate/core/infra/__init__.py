from .breaker import CircuitBreaker
from .breaker_manager import BreakerManager, ServiceDegradedError, ServiceTimeoutError

__all__ = ["BreakerManager", "CircuitBreaker", "ServiceDegradedError", "ServiceTimeoutError"]
