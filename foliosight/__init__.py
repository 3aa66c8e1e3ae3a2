"""
FolioSight - 多专家共识的投资组合报告生成器

基于 Clean/Hex 六边形架构构建，提供：
- 出处 TrustScore 评分与 SAVL 验证
- 八位专家的加权共识评分
- 类别筛选、资产选择与配置优化
- 复利计算、情景模拟与目标可行性评估

架构层次：
- domain: 核心领域模型与纯计算
- ports: 端口接口定义
- adapters: 模拟资产池、出处与专家打分适配器
- use_cases: 业务用例
- orchestrator: 报告流程编排
- presentation: 报告渲染与导出
- infrastructure: 基础设施（日志、缓存、错误）
- api: FastAPI 路由

快速开始：
```python
from foliosight import create_orchestrator, create_report_writer

orchestrator = create_orchestrator(seed=42)
report = orchestrator.generate_full_report()
print(create_report_writer().generate(report))
```

FastAPI 应用位于 ``foliosight.api.main:app``。
"""

__version__ = "1.0.0"
__author__ = "FolioSight Team"

# 核心领域模型
from foliosight.domain.models import (
    UserContext,
    Source,
    ExpertAnalysis,
    ExpertConsensus,
    Asset,
    AssetCategory,
    Portfolio,
    PortfolioReport,
    GoalFeasibility,
)

# 编排器
from foliosight.orchestrator import (
    PortfolioOrchestrator,
    create_orchestrator,
)

# 报告生成
from foliosight.presentation import (
    ReportWriter,
    ReportFormat,
    create_report_writer,
)

__all__ = [
    # 版本信息
    "__version__",
    "__author__",
    # 领域模型
    "UserContext",
    "Source",
    "ExpertAnalysis",
    "ExpertConsensus",
    "Asset",
    "AssetCategory",
    "Portfolio",
    "PortfolioReport",
    "GoalFeasibility",
    # 编排器
    "PortfolioOrchestrator",
    "create_orchestrator",
    # 报告
    "ReportWriter",
    "ReportFormat",
    "create_report_writer",
]
