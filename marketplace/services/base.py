"""
Base classes and utilities for the service layer.

Every marketplace service receives its storage handle (a Django database
alias) at construction and logs through a per-class logger. Expected failures
are raised as typed ``MarketplaceError`` subclasses and logged as warnings by
``log_performance``; anything else is logged with a traceback and re-raised.
"""

import logging
import time
from functools import wraps
from typing import Callable, Optional

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS

from marketplace.domain.exceptions import MarketplaceError, ValidationFailed


class BaseService:
    """
    Base class for all services providing common functionality.

    Provides:
    - Logging with class name
    - Performance timing decorator
    - The database alias every query and transaction must use

    Usage:
        class InventoryLedger(BaseService):
            @BaseService.log_performance
            def reserve(self, product_id, quantity):
                self.logger.info(f"Reserving {quantity} of {product_id}")
                with transaction.atomic(using=self.using):
                    ...
    """

    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        """
        Initialize base service with logger and storage handle.

        Args:
            using: Database alias the service reads from and writes to
        """
        self.using = using
        self.logger = logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)

    @staticmethod
    def log_performance(func: Callable) -> Callable:
        """
        Decorator to log performance of service methods.

        Logs execution time, typed domain failures and unexpected errors.

        Example:
            @BaseService.log_performance
            def expensive_operation(self):
                # ... operation
        """

        @wraps(func)
        def wrapper(self, *args, **kwargs):
            start_time = time.time()
            method_name = f"{self.__class__.__name__}.{func.__name__}"

            try:
                self.logger.debug(f"{method_name} started")
                result = func(self, *args, **kwargs)
                elapsed_time = (time.time() - start_time) * 1000  # Convert to ms
                self.logger.info(f"{method_name} completed in {elapsed_time:.2f}ms")
                return result

            except MarketplaceError as e:
                elapsed_time = (time.time() - start_time) * 1000
                self.logger.warning(f"{method_name} failed with error '{e.code}' in {elapsed_time:.2f}ms: {e.message}")
                raise

            except Exception as e:
                elapsed_time = (time.time() - start_time) * 1000
                self.logger.error(
                    f"{method_name} raised exception after {elapsed_time:.2f}ms: {str(e)}",
                    exc_info=True,
                )
                raise

        return wrapper


def paginate(queryset, page: int = 1, page_size: Optional[int] = None) -> dict:
    """
    Slice ``queryset`` into one page.

    ``page_size`` defaults to ``MARKETPLACE["ORDER_PAGE_SIZE"]`` and is capped
    at ``MARKETPLACE["MAX_PAGE_SIZE"]``. A page past the end is empty.

    Returns:
        ``{"results", "count", "page", "page_size", "num_pages"}``
    """
    marketplace_settings = getattr(settings, "MARKETPLACE", {})
    page_size = page_size or marketplace_settings.get("ORDER_PAGE_SIZE", 20)
    page_size = min(page_size, marketplace_settings.get("MAX_PAGE_SIZE", 100))
    if page < 1 or page_size < 1:
        raise ValidationFailed(
            "page and page_size must be positive", details={"page": page, "page_size": page_size}
        )

    offset = (page - 1) * page_size
    total_count = queryset.count()
    return {
        "results": list(queryset[offset : offset + page_size]),
        "count": total_count,
        "page": page,
        "page_size": page_size,
        "num_pages": (total_count + page_size - 1) // page_size,
    }
