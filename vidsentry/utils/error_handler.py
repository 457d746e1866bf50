import asyncio
import functools
from typing import TypeVar, Callable, Optional
from loguru import logger
from ..exceptions import VidSentryException, ProviderException

T = TypeVar('T')


def log_exceptions(
    log_level: str = "ERROR",
    include_traceback: bool = True,
    custom_message: Optional[str] = None
):
    """
    Decorator to log exceptions.

    Args:
        log_level: Log level for exception logging
        include_traceback: Whether to include traceback in log
        custom_message: Custom message to include in log
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        def _log(e: Exception):
            message = custom_message or f"Exception in {func.__name__}"
            if include_traceback:
                logger.opt(exception=True).log(log_level, f"{message}: {e}")
            else:
                logger.log(log_level, f"{message}: {e}")

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                _log(e)
                raise

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                _log(e)
                raise

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        else:
            return sync_wrapper

    return decorator


def convert_exceptions(exception_map: dict):
    """
    Decorator to convert foreign exceptions to vidsentry exceptions.

    Exceptions that already derive from VidSentryException pass through.

    Args:
        exception_map: Dictionary mapping exception types to vidsentry exception types
    """
    def _convert(e: Exception):
        if isinstance(e, VidSentryException):
            return None
        for source_exc, target_exc in exception_map.items():
            if isinstance(e, source_exc):
                return target_exc(str(e), details={"original_exception": type(e).__name__})
        return None

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                converted = _convert(e)
                if converted is None:
                    raise
                raise converted from e

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                converted = _convert(e)
                if converted is None:
                    raise
                raise converted from e

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        else:
            return sync_wrapper

    return decorator


class ErrorHandler:
    """Centralized error handling utilities."""

    @staticmethod
    def handle_provider_error(e: Exception, provider_name: str) -> ProviderException:
        """Convert provider-specific exceptions to ProviderException."""
        error_details = {
            "provider": provider_name,
            "original_exception": type(e).__name__,
            "message": str(e)
        }

        logger.error(f"Provider {provider_name} error: {e}")
        return ProviderException(
            f"Provider {provider_name} failed: {e}",
            error_code="PROVIDER_ERROR",
            details=error_details
        )

    @staticmethod
    def describe(e: Exception) -> str:
        """Caller-facing detail string for an exception."""
        return str(e) or type(e).__name__
