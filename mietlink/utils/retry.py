from contextlib import contextmanager
from functools import wraps

from pybreaker import CircuitBreakerError
from structlog import get_logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from mietlink.core.errors import ExternalServiceFailure

logger = get_logger()

def retry_api(tries: int = 3, delay: float = 1, backoff: float = 2, retry_on=(ExternalServiceFailure,)):
    def decorator(func):
        @wraps(func)
        @retry(
            stop=stop_after_attempt(tries),
            wait=wait_exponential(multiplier=delay, exp_base=backoff),
            retry=retry_if_exception_type(retry_on),
            reraise=True,
        )
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                logger.warning("Retry attempt", func=func.__name__, error=str(e))
                raise
        return wrapper
    return decorator


@contextmanager
def breaker_guard(service: str = "gemini"):
    """Surface an open circuit as the same 502 a failed call produces."""
    try:
        yield
    except CircuitBreakerError as e:
        logger.warning("Circuit open", service=service, error=str(e))
        raise ExternalServiceFailure(f"{service} is temporarily unavailable", service=service) from e
