"""
日志系统

- JSON 行格式（生产环境）与彩色控制台格式（开发环境）
- LogContext: 记录一次报告生成/渲染的开始、完成、失败及耗时
- 请求 ID、用户、路径等上下文字段通过 logging 的 extra 传递
"""

import json
import logging
import sys
import time
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Dict, Optional


# 允许出现在日志输出中的上下文字段
CONTEXT_FIELDS = ("request_id", "user", "method", "path", "status_code")

# 启动后降级的第三方日志记录器
NOISY_LOGGERS = ("uvicorn.access",)


def _context_of(record: logging.LogRecord) -> Dict[str, Any]:
    context = {}
    for name in CONTEXT_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            context[name] = value
    return context


class StructuredFormatter(logging.Formatter):
    """每条记录输出一行 JSON"""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        payload.update(_context_of(record))

        duration_ms = getattr(record, "duration_ms", None)
        if duration_ms is not None:
            payload["duration_ms"] = round(duration_ms, 2)

        fields = getattr(record, "fields", None)
        if fields:
            payload["fields"] = fields

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class SimpleFormatter(logging.Formatter):
    """开发环境的彩色单行格式"""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, "")
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        parts = [f"{clock} {color}{record.levelname:<7}{self.RESET} {record.name} | {record.getMessage()}"]

        context = _context_of(record)
        if context:
            parts.append(" ".join(f"{k}={v}" for k, v in context.items()))

        duration_ms = getattr(record, "duration_ms", None)
        if duration_ms is not None:
            parts.append(f"{duration_ms:.1f}ms")

        line = "  ".join(parts)
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    配置根日志记录器

    Args:
        level: 日志级别名称，无法识别时回退到 INFO
        json_format: 控制台是否输出 JSON 行
        log_file: 额外写入的日志文件（始终为 JSON 行）

    Returns:
        logging.Logger: 根日志记录器
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(StructuredFormatter() if json_format else SimpleFormatter())
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter())
        root.addHandler(file_handler)

    # 请求日志已由 API 中间件输出
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """
    计时日志上下文

    with LogContext(logger, "generate_full_report", request_id=rid, user="kim"):
        ...

    退出时写入 duration_ms；异常按原样继续抛出。
    """

    def __init__(
        self,
        logger: logging.Logger,
        operation: str,
        request_id: Optional[str] = None,
        level: int = logging.INFO,
        **fields
    ):
        self.logger = logger
        self.operation = operation
        self.request_id = request_id
        self.level = level
        self.fields = fields
        self.duration_ms = 0.0
        self._started: Optional[float] = None

    def _extra(self, **values) -> Dict[str, Any]:
        extra: Dict[str, Any] = {"request_id": self.request_id, "fields": self.fields}
        extra.update(values)
        return extra

    def __enter__(self):
        self._started = time.perf_counter()
        self.logger.log(self.level, f"开始 {self.operation}", extra=self._extra())
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = (time.perf_counter() - self._started) * 1000
        extra = self._extra(duration_ms=self.duration_ms)

        if exc_type is None:
            self.logger.log(self.level, f"完成 {self.operation}", extra=extra)
        else:
            self.logger.error(
                f"失败 {self.operation}: {exc_val}",
                extra=extra,
                exc_info=(exc_type, exc_val, exc_tb),
            )
        return False


def log_performance(operation: Optional[str] = None, logger: Optional[logging.Logger] = None):
    """以 LogContext（DEBUG 级别）包裹函数调用"""
    def decorator(func):
        name = operation or func.__qualname__

        @wraps(func)
        def wrapper(*args, **kwargs):
            log = logger or get_logger(func.__module__)
            with LogContext(log, name, level=logging.DEBUG):
                return func(*args, **kwargs)
        return wrapper
    return decorator
