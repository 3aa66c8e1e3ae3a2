"""
依赖注入 - FastAPI 依赖配置

集中管理所有服务的创建和注入，
确保单一实例和正确的生命周期管理。
"""

from functools import lru_cache
from typing import Optional, Tuple
import os

from dotenv import load_dotenv

from foliosight.adapters.system_time_adapter import SystemTimeAdapter
from foliosight.domain.models import GoalFeasibility, PortfolioReport
from foliosight.infrastructure.cache import CacheConfig, LRUCache
from foliosight.orchestrator import PortfolioOrchestrator, create_orchestrator
from foliosight.presentation import ReportWriter, create_report_writer


load_dotenv()


# 缓存值：报告与对应的可行性评估
CachedReport = Tuple[PortfolioReport, GoalFeasibility]


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# 配置类
class Settings:
    """应用配置（实例化时读取环境变量）"""

    APP_VERSION: str = "1.0.0"

    def __init__(self):
        # 基本配置
        self.APP_NAME: str = os.getenv('APP_NAME', 'FolioSight API')
        self.DEBUG: bool = _env_bool('DEBUG')

        # 服务配置
        self.HOST: str = os.getenv('HOST', '0.0.0.0')
        self.PORT: int = int(os.getenv('PORT', '8000'))

        # CORS 配置
        self.CORS_ORIGINS: list = [
            origin.strip() for origin in os.getenv('CORS_ORIGINS', '*').split(',')
        ]

        # 日志配置
        self.LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')
        self.LOG_JSON: bool = _env_bool('LOG_JSON')

        # 报告缓存（秒）
        self.REPORT_CACHE_TTL: int = int(os.getenv('REPORT_CACHE_TTL', '3600'))

        # 专家打分随机种子（为空则不固定）
        seed = os.getenv('EXPERT_SEED')
        self.EXPERT_SEED: Optional[int] = int(seed) if seed else None


@lru_cache()
def get_settings() -> Settings:
    """获取应用配置"""
    return Settings()


class ServiceContainer:
    """
    服务容器 - 管理所有服务实例

    采用单例模式确保服务实例的复用
    """

    _instance: Optional['ServiceContainer'] = None
    _initialized: bool = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        settings = get_settings()

        self._time = SystemTimeAdapter()

        # 初始化编排器（模拟资产池与出处）
        self._orchestrator = create_orchestrator(
            time_port=self._time,
            seed=settings.EXPERT_SEED,
        )

        # 初始化报告生成器
        self._report_writer = create_report_writer()

        # 报告缓存
        self._report_cache: LRUCache[CachedReport] = LRUCache(
            CacheConfig(max_size=32, default_ttl=settings.REPORT_CACHE_TTL)
        )

        self._initialized = True

    @property
    def orchestrator(self) -> PortfolioOrchestrator:
        """获取编排器实例"""
        return self._orchestrator

    @property
    def report_writer(self) -> ReportWriter:
        """获取报告生成器实例"""
        return self._report_writer

    @property
    def report_cache(self) -> LRUCache:
        """获取报告缓存"""
        return self._report_cache

    @property
    def time_adapter(self) -> SystemTimeAdapter:
        """获取时间适配器"""
        return self._time


@lru_cache()
def get_service_container() -> ServiceContainer:
    """
    获取服务容器单例

    使用 lru_cache 确保只创建一次
    """
    return ServiceContainer()


def get_orchestrator() -> PortfolioOrchestrator:
    """FastAPI 依赖：获取编排器"""
    return get_service_container().orchestrator


def get_report_writer() -> ReportWriter:
    """FastAPI 依赖：获取报告生成器"""
    return get_service_container().report_writer


def get_report_cache() -> LRUCache:
    """FastAPI 依赖：获取报告缓存"""
    return get_service_container().report_cache


def get_time_service() -> SystemTimeAdapter:
    """FastAPI 依赖：获取时间服务"""
    return get_service_container().time_adapter
