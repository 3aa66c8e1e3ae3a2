"""
表现层 - 报告生成与导出

负责将 PortfolioReport 转换为用户可读的报告格式或 JSON 导出结构。

包含：
- ReportWriter: 报告生成器
- ReportFormat: 报告格式枚举
- ReportSection: 分节模板基类
- build_export_data: JSON 导出
"""

from foliosight.presentation.report_writer import (
    ReportWriter,
    ReportFormat,
    ReportSection,
    SummarySection,
    CategorySection,
    AllocationSection,
    CompoundSection,
    ScenarioSection,
    ExpertSection,
    SourceSection,
    build_export_data,
    create_report_writer,
)

__all__ = [
    "ReportWriter",
    "ReportFormat",
    "ReportSection",
    "SummarySection",
    "CategorySection",
    "AllocationSection",
    "CompoundSection",
    "ScenarioSection",
    "ExpertSection",
    "SourceSection",
    "build_export_data",
    "create_report_writer",
]
