"""
错误处理

- FolioSightError 层次：每个子类绑定一个 ErrorCode，附加上下文写入 details
- ErrorHandler: 把任意异常（含端口异常）归一化为 FolioSightError
- retry / error_boundary 装饰器
"""

import logging
import time
from functools import wraps
from typing import Any, Callable, Dict, Optional, Tuple, Type, TypeVar

from foliosight.domain.models import ErrorCode
from foliosight.ports.interfaces import (
    PortError,
    DataUnavailableError as PortDataUnavailableError,
    ScoringUnavailableError,
)


logger = logging.getLogger(__name__)

T = TypeVar('T')


# ==================== 异常类层次 ====================

class FolioSightError(Exception):
    """
    FolioSight 基础异常

    子类通过类属性 code 指定错误码；关键字参数中非 None 的值并入 details。
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
        **context: Any
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.code
        self.details = dict(details or {})
        self.details.update({k: v for k, v in context.items() if v is not None})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(FolioSightError):
    """用户画像等输入不合法"""
    code = ErrorCode.INVALID_INPUT

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, field=field)


class DataUnavailableError(FolioSightError):
    """候选池或出处数据源不可用"""
    code = ErrorCode.DATA_UNAVAILABLE

    def __init__(self, source: str, reason: Optional[str] = None):
        message = f"数据源 '{source}' 不可用" + (f": {reason}" if reason else "")
        super().__init__(message, source=source, reason=reason)


class ScoringError(FolioSightError):
    code = ErrorCode.SCORING_UNAVAILABLE

    def __init__(self, message: str, backend: Optional[str] = None):
        super().__init__(message, backend=backend)


class PortfolioConstructionError(FolioSightError):
    """筛选或选股后没有可投资标的"""
    code = ErrorCode.PORTFOLIO_EMPTY

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message, stage=stage)


class ReportGenerationError(FolioSightError):
    code = ErrorCode.REPORT_FAILED

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message, step=step)


# ==================== 错误归一化 ====================

def _from_scoring(e: ScoringUnavailableError, message: str) -> FolioSightError:
    return ScoringError(message, backend=e.source)


def _from_port_data(e: PortDataUnavailableError, message: str) -> FolioSightError:
    return DataUnavailableError(e.source, e.message)


def _from_port(e: PortError, message: str) -> FolioSightError:
    return FolioSightError(message, ErrorCode.DATA_UNAVAILABLE, source=e.source)


def _from_bad_value(e: Exception, message: str) -> FolioSightError:
    return FolioSightError(message, ErrorCode.INVALID_INPUT, original_type=type(e).__name__)


# 按顺序匹配，子类必须排在父类之前
_CONVERTERS: Tuple[Tuple[Type[Exception], Callable[[Any, str], FolioSightError]], ...] = (
    (ScoringUnavailableError, _from_scoring),
    (PortDataUnavailableError, _from_port_data),
    (PortError, _from_port),
    (ValueError, _from_bad_value),
    (TypeError, _from_bad_value),
)


class ErrorHandler:
    """异常归一化"""

    @staticmethod
    def handle_exception(e: Exception, context: Optional[str] = None) -> FolioSightError:
        """
        将异常转换为 FolioSightError

        Args:
            e: 原始异常；已是 FolioSightError 时原样返回
            context: 上下文，作为 "[context] " 前缀加到消息前

        Returns:
            FolioSightError: 端口异常映射到对应错误码，其余为 internal_error
        """
        if isinstance(e, FolioSightError):
            return e

        message = f"[{context}] {e}" if context else str(e)

        for exc_type, convert in _CONVERTERS:
            if isinstance(e, exc_type):
                return convert(e, message)

        return FolioSightError(message, original_type=type(e).__name__)


# ==================== 装饰器 ====================

def retry(
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: tuple = (Exception,),
    on_retry: Optional[Callable[[Exception, int], None]] = None
):
    """
    重试装饰器（指数退避）

    仅重试 exceptions 中的类型；用尽次数后抛出最后一次异常。
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            wait = delay
            for attempt in range(1, max_attempts + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_attempts:
                        logger.error(f"{func.__name__} 重试 {max_attempts} 次后仍失败: {e}")
                        raise

                    if on_retry:
                        on_retry(e, attempt)
                    logger.warning(f"{func.__name__} 第 {attempt} 次失败: {e}，{wait:.1f}秒后重试")

                    if wait > 0:
                        time.sleep(wait)
                    wait *= backoff
        return wrapper
    return decorator


def error_boundary(
    default: Any = None,
    reraise: bool = False,
    context: Optional[str] = None
):
    """
    错误边界，只用于报告中的可选步骤

    失败时记录日志并返回 default；reraise=True 时改为抛出归一化后的 FolioSightError。
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                error = ErrorHandler.handle_exception(e, context or func.__name__)
                logger.error(f"错误边界捕获: {error.message}")
                if reraise:
                    raise error from e
                return default
        return wrapper
    return decorator
