import functools
import logging
from utils.exceptions import ParamSearchException

def handle_engine_errors(operation_name: str):
    """Decorator for consistent error handling in engines."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ParamSearchException:
                # Package errors already carry their meaning
                raise
            except Exception as e:
                logger = getattr(args[0], 'logger', None) if args else None
                if logger is None:
                    logger = logging.getLogger(func.__module__)
                logger.error(f"{operation_name} failed: {e}", exc_info=True)
                raise ParamSearchException(f"{operation_name} failed: {str(e)}") from e
        return wrapper
    return decorator
