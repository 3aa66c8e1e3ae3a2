"""
基础设施层 - 横切关注点

提供日志、缓存、错误处理等基础服务。

包含：
- logging: 结构化日志系统
- errors: 错误层次、错误边界与重试
- cache: LRU + TTL 缓存
"""

from foliosight.infrastructure.logging import (
    setup_logging,
    get_logger,
    LogContext,
    log_performance,
    StructuredFormatter,
    SimpleFormatter,
)
from foliosight.infrastructure.errors import (
    FolioSightError,
    ValidationError,
    DataUnavailableError,
    ScoringError,
    PortfolioConstructionError,
    ReportGenerationError,
    ErrorHandler,
    retry,
    error_boundary,
)
from foliosight.infrastructure.cache import (
    LRUCache,
    CacheConfig,
    CacheStats,
)

__all__ = [
    # 日志
    "setup_logging",
    "get_logger",
    "LogContext",
    "log_performance",
    "StructuredFormatter",
    "SimpleFormatter",
    # 错误
    "FolioSightError",
    "ValidationError",
    "DataUnavailableError",
    "ScoringError",
    "PortfolioConstructionError",
    "ReportGenerationError",
    "ErrorHandler",
    "retry",
    "error_boundary",
    # 缓存
    "LRUCache",
    "CacheConfig",
    "CacheStats",
]
