"""DAX 가져오기/조회 서비스 패키지"""

from daxdata.service.dax_service import (
    DAXService,
    ImportResult,
    MetricsResult,
    PaginatedResult,
    PaginationMeta,
    normalize_pagination,
)
from daxdata.service.errors import DAXStorageError, DAXValidationError

__all__ = [
    "DAXService",
    "DAXStorageError",
    "DAXValidationError",
    "ImportResult",
    "MetricsResult",
    "PaginatedResult",
    "PaginationMeta",
    "normalize_pagination",
]
