"""
编排层 - 报告生成的统一入口

负责：
1. 组装用例
2. 生成完整报告
3. 评估目标可行性

包含：
- PortfolioOrchestrator: 组合编排器
- create_orchestrator: 工厂函数
"""

from foliosight.orchestrator.orchestrator import PortfolioOrchestrator, create_orchestrator

__all__ = [
    "PortfolioOrchestrator",
    "create_orchestrator",
]
