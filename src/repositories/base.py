"""
Core repository infrastructure.

This module provides:
- Common exceptions raised at the repository boundary
- A decorator for consistent repository error logging
"""

import logging
from functools import wraps
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


# ============================================================================
# Exceptions
# ============================================================================

class NotFound(Exception):
    """Raised when a requested resource is not found."""
    pass


class ConflictError(Exception):
    """Raised when an operation would conflict with existing data."""
    pass


# ============================================================================
# Decorators
# ============================================================================

def repository_operation(operation_name: Optional[str] = None):
    """
    Decorator for consistent repository error handling and logging.

    Features:
    - Debug-level entry/exit logging
    - NotFound and ConflictError propagate unchanged (caller contract errors)
    - Unexpected errors are logged with a stack trace and re-raised

    Usage:
        @repository_operation("get_category")
        def get(self, category_id: str) -> Optional[Category]:
            ...
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            op_name = operation_name or func.__name__
            try:
                logger.debug(f"Starting {op_name}")
                result = func(*args, **kwargs)
                logger.debug(f"Completed {op_name}")
                return result
            except (NotFound, ConflictError):
                raise
            except Exception as e:
                logger.error(f"Unexpected error in {op_name}: {type(e).__name__}: {e}", exc_info=True)
                raise
        return wrapper
    return decorator
