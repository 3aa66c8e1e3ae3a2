"""
出处验证用例 - 获取出处并执行 SAVL 两层筛选
"""

import logging
from datetime import date
from typing import Optional

from foliosight.domain.config import DEFAULT_CONFIG, PortfolioConfig
from foliosight.domain.models import SAVLValidation
from foliosight.domain.savl import perform_savl_validation, perform_source_backtracking
from foliosight.infrastructure.errors import error_boundary
from foliosight.ports.interfaces import SourceProviderPort, TimePort
from foliosight.use_cases.base import UseCase


logger = logging.getLogger(__name__)


class ValidateSourcesUseCase(UseCase[SAVLValidation]):
    """
    出处验证

    回溯复查只用于日志提示，失败不影响筛选结果。
    """

    def __init__(
        self,
        source_port: SourceProviderPort,
        time_port: TimePort,
        config: PortfolioConfig = DEFAULT_CONFIG,
    ):
        self.sources = source_port
        self.time = time_port
        self.config = config

    def execute(self, as_of: Optional[date] = None) -> SAVLValidation:
        """
        执行出处验证

        Args:
            as_of: 参考日期（缺省取时间端口的当前日期）

        Returns:
            SAVLValidation: 筛选结果
        """
        reference = as_of or self.time.get_current_datetime().date()
        sources = self.sources.list_sources(reference)

        validation = perform_savl_validation(sources, config=self.config)
        self._backtrack(sources)

        logger.info(
            f"出处验证完成: {len(validation.verified)}/{len(sources)} 条通过 VERIFIED"
        )
        return validation

    @error_boundary(default=[], context="source_backtracking")
    def _backtrack(self, sources):
        return perform_source_backtracking(sources, thresholds=self.config.savl)
