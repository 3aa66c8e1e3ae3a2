"""
Infrastructure 层测试 - 日志、缓存、错误处理
"""

import json
import logging

import pytest

from foliosight.domain.models import ErrorCode
from foliosight.infrastructure.cache import CacheConfig, LRUCache
from foliosight.infrastructure.errors import (
    DataUnavailableError,
    ErrorHandler,
    FolioSightError,
    PortfolioConstructionError,
    ReportGenerationError,
    ScoringError,
    ValidationError,
    error_boundary,
    retry,
)
from foliosight.infrastructure.logging import (
    LogContext,
    SimpleFormatter,
    StructuredFormatter,
    get_logger,
    log_performance,
    setup_logging,
)
from foliosight.ports.interfaces import (
    DataUnavailableError as PortDataUnavailableError,
    PortError,
    ScoringUnavailableError,
)


def _record(message="hello", **extra):
    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="test.py",
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLogging:
    """日志系统测试"""

    def test_get_logger(self):
        assert isinstance(get_logger("foliosight.test"), logging.Logger)

    def test_structured_formatter(self):
        output = StructuredFormatter().format(_record(request_id="req-1", duration_ms=12.5))
        data = json.loads(output)

        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["request_id"] == "req-1"
        assert data["duration_ms"] == 12.5
        assert data["timestamp"].endswith("Z")

    def test_simple_formatter(self):
        output = SimpleFormatter().format(_record(request_id="req-2"))

        assert "hello" in output
        assert "req-2" in output

    def test_setup_logging_json(self):
        root = logging.getLogger()
        previous_handlers, previous_level = list(root.handlers), root.level
        try:
            setup_logging(level="DEBUG", json_format=True)
            assert root.level == logging.DEBUG
            assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        finally:
            root.handlers[:] = previous_handlers
            root.setLevel(previous_level)

    def test_log_context_success(self):
        logger = get_logger("foliosight.test.context")

        with LogContext(logger, "op", request_id="r") as ctx:
            pass

        assert ctx.duration_ms >= 0

    def test_log_context_does_not_swallow(self, caplog):
        logger = get_logger("foliosight.test.context")

        with pytest.raises(ValueError):
            with LogContext(logger, "failing-op"):
                raise ValueError("boom")

        assert "失败 failing-op" in caplog.text

    def test_log_performance(self):
        @log_performance()
        def add(a, b):
            return a + b

        assert add(1, 2) == 3


class TestCache:
    """LRU 缓存测试"""

    @pytest.fixture
    def clock(self):
        now = [1000.0]
        return now

    @pytest.fixture
    def cache(self, clock):
        return LRUCache(CacheConfig(max_size=2, default_ttl=60), clock=lambda: clock[0])

    def test_get_set(self, cache):
        cache.set("a", 1)

        assert cache.get("a") == 1
        assert cache.get("missing") is None
        assert len(cache) == 1

    def test_ttl_expiry(self, cache, clock):
        cache.set("a", 1)
        clock[0] += 60
        assert cache.get("a") == 1

        clock[0] += 1
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_custom_ttl(self, cache, clock):
        cache.set("a", 1, ttl=5)
        clock[0] += 6
        assert cache.get("a") is None

    def test_lru_eviction(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)

        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.get("c") == 3
        assert cache.stats.evictions == 1

    def test_overwrite_does_not_evict(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)

        assert cache.get("a") == 10
        assert cache.get("b") == 2
        assert cache.stats.evictions == 0

    def test_delete_and_clear(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)

        assert cache.delete("a") is True
        assert cache.delete("a") is False
        cache.clear()
        assert len(cache) == 0

    def test_stats(self, cache):
        cache.set("a", 1)
        cache.get("a")
        cache.get("x")

        stats = cache.get_stats_dict()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 50.0

    def test_get_or_create(self, cache):
        calls = []

        def factory():
            calls.append(1)
            return len(calls)

        assert cache.get_or_create("k", factory) == 1
        assert cache.get_or_create("k", factory) == 1
        assert cache.get_or_create("k", factory, refresh=True) == 2
        assert cache.get("k") == 2

    def test_get_or_create_does_not_store_failures(self, cache):
        def factory():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            cache.get_or_create("k", factory)
        assert len(cache) == 0

    def test_zero_ttl_never_expires(self, cache, clock):
        cache.set("a", 1, ttl=0)
        clock[0] += 10_000
        assert cache.get("a") == 1

    def test_make_key_is_stable(self):
        key1 = LRUCache.make_key("portfolio", {"b": 2, "a": 1})
        key2 = LRUCache.make_key("portfolio", {"a": 1, "b": 2})

        assert key1 == key2
        assert key1 != LRUCache.make_key("portfolio", {"a": 1})


class TestErrors:
    """错误类测试"""

    def test_base_error(self):
        error = FolioSightError("oops", details={"k": "v"})

        assert error.error_code == ErrorCode.INTERNAL_ERROR
        assert error.to_dict() == {"error_code": "internal_error", "message": "oops", "details": {"k": "v"}}

    def test_subclasses(self):
        assert ValidationError("bad", field="name").details == {"field": "name"}
        assert DataUnavailableError("universe", "offline").error_code == ErrorCode.DATA_UNAVAILABLE
        assert "universe" in DataUnavailableError("universe").message
        assert ScoringError("x", backend="llm").error_code == ErrorCode.SCORING_UNAVAILABLE
        assert PortfolioConstructionError("x", stage="s").error_code == ErrorCode.PORTFOLIO_EMPTY
        assert ReportGenerationError("x", step="render").details == {"step": "render"}


class TestErrorHandler:

    def test_passthrough(self):
        error = ValidationError("bad")
        assert ErrorHandler.handle_exception(error) is error

    @pytest.mark.parametrize("exc,expected", [
        (ScoringUnavailableError("down", source="llm"), ErrorCode.SCORING_UNAVAILABLE),
        (PortDataUnavailableError("down", source="universe"), ErrorCode.DATA_UNAVAILABLE),
        (PortError("other"), ErrorCode.DATA_UNAVAILABLE),
        (ValueError("bad"), ErrorCode.INVALID_INPUT),
        (KeyError("x"), ErrorCode.INTERNAL_ERROR),
    ])
    def test_mapping(self, exc, expected):
        assert ErrorHandler.handle_exception(exc).error_code == expected

    def test_context_prefix(self):
        error = ErrorHandler.handle_exception(RuntimeError("boom"), "report")
        assert error.message == "[report] boom"


class TestRetryAndBoundary:

    def test_retry_success_after_failures(self):
        attempts = []

        @retry(max_attempts=3, delay=0)
        def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise RuntimeError("fail")
            return "ok"

        assert flaky() == "ok"
        assert len(attempts) == 3

    def test_retry_exhausted(self):
        @retry(max_attempts=2, delay=0)
        def always_fail():
            raise RuntimeError("fail")

        with pytest.raises(RuntimeError):
            always_fail()

    def test_retry_ignores_other_exceptions(self):
        calls = []

        @retry(max_attempts=3, delay=0, exceptions=(ValueError,))
        def wrong_type():
            calls.append(1)
            raise TypeError("no retry")

        with pytest.raises(TypeError):
            wrong_type()
        assert len(calls) == 1

    def test_error_boundary_default(self):
        @error_boundary(default="fallback")
        def broken():
            raise RuntimeError("fail")

        assert broken() == "fallback"

    def test_error_boundary_reraise(self):
        @error_boundary(reraise=True, context="step")
        def broken():
            raise ValueError("fail")

        with pytest.raises(FolioSightError) as exc_info:
            broken()
        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT
