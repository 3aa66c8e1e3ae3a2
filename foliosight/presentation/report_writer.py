"""
报告生成器 - 将 PortfolioReport 转换为用户可读的报告

设计原则：
1. 分节模板：报告由若干独立的分节模板拼接
2. 多格式支持：Markdown、HTML、纯文本
3. 可扩展：支持注册自定义分节
"""

import html
import re
from abc import ABC, abstractmethod
from datetime import date
from enum import Enum
from typing import List, Optional

from foliosight.domain.calculator import (
    calculate_success_probability,
    calculate_undervaluation_score,
    generate_investment_schedule,
)
from foliosight.domain.models import (
    ExportData,
    GoalFeasibility,
    PortfolioReport,
    ScenarioType,
)
from foliosight.infrastructure.errors import ReportGenerationError
from foliosight.infrastructure.logging import log_performance


class ReportFormat(str, Enum):
    """报告格式"""
    MARKDOWN = "markdown"
    HTML = "html"
    TEXT = "text"


SCENARIO_LABELS = {
    ScenarioType.BULL: "乐观",
    ScenarioType.BASE: "基准",
    ScenarioType.BEAR: "悲观",
}


def _money(value: float) -> str:
    return f"{value:,.0f}"


# ==================== 分节模板 ====================

class ReportSection(ABC):
    """报告分节基类"""

    @abstractmethod
    def render(self, report: PortfolioReport, feasibility: Optional[GoalFeasibility]) -> str:
        """渲染分节（Markdown）"""
        pass


class SummarySection(ReportSection):
    """报告标题与摘要"""

    def render(self, report: PortfolioReport, feasibility: Optional[GoalFeasibility]) -> str:
        meta = report.metadata
        compound = report.compound_calculation
        portfolio = report.portfolio

        text = f"# AI 专家共识投资组合报告 {meta.version}\n\n"
        text += f"**报告日期**: {meta.report_date} | **投资者**: {report.user_context.name}\n\n"
        text += "| 指标 | 数值 |\n"
        text += "|------|------|\n"
        text += f"| 每月投入 | {_money(meta.monthly_investment)} |\n"
        text += f"| 目标金额 | {_money(meta.five_year_goal)} |\n"
        text += f"| 组合 CAGR | {portfolio.target_cagr:.2f}% |\n"
        text += f"| 预计终值 | {_money(compound.final_value)} |\n"
        text += f"| 风险等级 | {portfolio.risk_level.value} |\n"
        text += f"| 策略类型 | {portfolio.strategy_type.value} |\n"
        text += f"| 分散度 | {portfolio.diversification_score:.1f} |\n"

        probability = calculate_success_probability(compound.final_value, meta.five_year_goal)
        text += f"| 达成概率 | {probability:.0f}% |\n"

        if feasibility is not None:
            status = "可达成" if feasibility.achievable else "存在缺口"
            text += f"\n**目标评估**: {status}（置信度 {feasibility.confidence:.1f}%）\n\n"
            text += f"> {feasibility.recommendation}\n"

        return text


class CategorySection(ReportSection):
    """入选类别"""

    def render(self, report: PortfolioReport, feasibility: Optional[GoalFeasibility]) -> str:
        text = "## 入选类别\n\n"
        text += "| 类别 | 平均分 | 共识分 | CAGR | Sharpe | 最大回撤 |\n"
        text += "|------|--------|--------|------|--------|----------|\n"
        for c in report.selected_categories:
            text += (
                f"| {c.name} | {c.average_score:.1f} | {c.consensus_score:.1f} | "
                f"{c.cagr:.0f}% | {c.sharpe_ratio:.2f} | {c.max_drawdown:.0f}% |\n"
            )
        return text


class AllocationSection(ReportSection):
    """标的与配置"""

    def render(self, report: PortfolioReport, feasibility: Optional[GoalFeasibility]) -> str:
        assets = {a.ticker: a for a in report.top_assets}

        text = "## 组合配置\n\n"
        text += "| 标的 | 名称 | 类别 | 配置 | 金额 | 预期 CAGR | 出处等级 | 估值空间 |\n"
        text += "|------|------|------|------|------|-----------|----------|----------|\n"
        for allocation in report.portfolio.allocations:
            asset = assets.get(allocation.ticker)
            name = asset.name if asset else "-"
            grade = asset.trust_grade.value if asset else "-"
            upside = "-"
            if asset and asset.sell_price and asset.current_price:
                upside = f"{calculate_undervaluation_score(asset.sell_price, asset.current_price):.1f}"
            text += (
                f"| {allocation.ticker} | {name} | {allocation.category} | "
                f"{allocation.allocation:.2f}% | {_money(allocation.amount)} | "
                f"{allocation.cagr:.0f}% | {grade} | {upside} |\n"
            )

        growth_points = [
            f"- **{a.ticker}**: {', '.join(a.key_growth_points)}"
            for a in report.top_assets
        ]
        if growth_points:
            text += "\n### 成长要点\n\n" + "\n".join(growth_points) + "\n"
        return text


class CompoundSection(ReportSection):
    """复利测算与定投计划"""

    SCHEDULE_PREVIEW_MONTHS = 6

    def render(self, report: PortfolioReport, feasibility: Optional[GoalFeasibility]) -> str:
        compound = report.compound_calculation

        text = "## 复利测算\n\n"
        text += (
            f"每月投入 {_money(compound.monthly_investment)}，"
            f"CAGR {compound.cagr:.2f}%，共 {compound.investment_period} 个月：\n\n"
        )
        text += "| 年份 | 累计投入 | 估值 | 收益 |\n"
        text += "|------|----------|------|------|\n"
        for row in compound.yearly_breakdown:
            text += f"| 第 {row.year} 年 | {_money(row.invested)} | {_money(row.value)} | {_money(row.gain)} |\n"

        text += (
            f"\n**总投入**: {_money(compound.total_invested)} | "
            f"**终值**: {_money(compound.final_value)} | "
            f"**收益**: {_money(compound.total_return)}\n"
        )

        start = _parse_date(report.metadata.report_date)
        if start is not None:
            months = min(self.SCHEDULE_PREVIEW_MONTHS, compound.investment_period)
            schedule = generate_investment_schedule(start, months, compound.monthly_investment)
            if schedule:
                text += "\n### 定投计划（前 6 个月）\n\n"
                text += "| 月份 | 日期 | 投入 | 累计 |\n"
                text += "|------|------|------|------|\n"
                for entry in schedule:
                    text += f"| {entry.month} | {entry.date} | {_money(entry.amount)} | {_money(entry.cumulative)} |\n"

        return text


class ScenarioSection(ReportSection):
    """情景模拟"""

    def render(self, report: PortfolioReport, feasibility: Optional[GoalFeasibility]) -> str:
        simulation = report.simulation

        text = "## 情景模拟\n\n"
        text += "| 情景 | 概率 | 预期收益 | CAGR | 回撤 |\n"
        text += "|------|------|----------|------|------|\n"
        for s in simulation.scenarios:
            label = SCENARIO_LABELS.get(s.scenario, s.scenario.value)
            text += (
                f"| {label} | {s.probability:.0f}% | {_money(s.expected_return)} | "
                f"{s.cagr:.2f}% | {s.drawdown:.0f}% |\n"
            )
        text += (
            f"\n**加权 ROI**: {_money(simulation.weighted_roi)} | "
            f"**Sharpe**: {simulation.sharpe_ratio:.2f} | "
            f"**波动率**: {simulation.volatility:.0f}% | "
            f"**政策风险**: {simulation.policy_risk:.0f}%\n"
        )
        return text


class ExpertSection(ReportSection):
    """专家共识"""

    def render(self, report: PortfolioReport, feasibility: Optional[GoalFeasibility]) -> str:
        consensus = report.expert_consensus

        text = "## 专家共识\n\n"
        text += f"**共识分数**: {consensus.consensus_score:.1f} / 10\n\n"

        if consensus.top_reasons:
            text += "### 核心理由\n\n"
            text += "\n".join(f"{i}. {reason}" for i, reason in enumerate(consensus.top_reasons, 1))
            text += "\n\n"

        if consensus.dissenting_opinion:
            text += f"**异议**: {consensus.dissenting_opinion}\n\n"
        if consensus.bias_guard_triggered:
            text += "⚠️ BiasGuard: 多数专家给出正面评价，注意从众偏差\n\n"
        if consensus.debate_triggered:
            text += "⚠️ 专家意见分歧较大（分差超过 3 分）\n\n"

        text += "| 专家 | 分数 | 担忧 |\n"
        text += "|------|------|------|\n"
        for a in consensus.analyses:
            concerns = "、".join(a.concerns) if a.concerns else "-"
            text += f"| {a.perspective} | {a.score:.1f} | {concerns} |\n"
        return text


class SourceSection(ReportSection):
    """已验证出处"""

    def render(self, report: PortfolioReport, feasibility: Optional[GoalFeasibility]) -> str:
        text = "## 出处\n\n"
        if not report.sources:
            return text + "暂无通过验证的出处\n"

        for i, source in enumerate(report.sources, 1):
            text += (
                f"{i}. [{source.title}]({source.url}) - {source.publisher}, "
                f"{source.publish_date} | {source.grade.value} | TrustScore {source.trust_score}\n"
            )

        validation = report.source_validation
        if validation is not None:
            text += (
                f"\n*Watchlist {len(validation.watchlist)} 条，Verified {len(validation.verified)} 条，"
                f"机会分数 {validation.adjusted_opportunity_score:.1f}*\n"
            )
        return text


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


# ==================== 报告生成器 ====================

class ReportWriter:
    """
    报告生成器

    职责：
    1. 按分节顺序渲染 Markdown
    2. 转换为 HTML 或纯文本
    """

    def __init__(self, sections: Optional[List[ReportSection]] = None):
        """初始化报告生成器"""
        self._sections: List[ReportSection] = sections if sections is not None else [
            SummarySection(),
            CategorySection(),
            AllocationSection(),
            CompoundSection(),
            ScenarioSection(),
            ExpertSection(),
            SourceSection(),
        ]

    @log_performance("render_report")
    def generate(
        self,
        report: PortfolioReport,
        format: ReportFormat = ReportFormat.MARKDOWN,
        feasibility: Optional[GoalFeasibility] = None,
    ) -> str:
        """
        生成报告

        Args:
            report: 报告根聚合
            format: 报告格式
            feasibility: 目标可行性（可选）

        Returns:
            str: 生成的报告

        Raises:
            ReportGenerationError: 格式不受支持或某个分节渲染失败
        """
        try:
            format = ReportFormat(format)
        except ValueError:
            raise ReportGenerationError(f"不支持的报告格式: {format!r}", step="format")

        rendered = []
        for section in self._sections:
            try:
                rendered.append(section.render(report, feasibility))
            except Exception as e:
                raise ReportGenerationError(
                    f"分节渲染失败: {e}", step=type(section).__name__
                ) from e

        markdown_report = "\n".join(rendered)
        markdown_report += "\n---\n*此报告由 FolioSight 自动生成，仅供参考，不构成投资建议*\n"

        if format == ReportFormat.HTML:
            return self._markdown_to_html(markdown_report)
        if format == ReportFormat.TEXT:
            return self._markdown_to_text(markdown_report)
        return markdown_report

    def _inline_html(self, text: str) -> str:
        text = html.escape(text, quote=False)
        text = re.sub(r'\*\*(.+?)\*\*', r'<strong>\1</strong>', text)
        text = re.sub(r'\*(.+?)\*', r'<em>\1</em>', text)
        text = re.sub(r'\[(.+?)\]\((.+?)\)', r'<a href="\2">\1</a>', text)
        return text

    def _markdown_to_html(self, markdown: str) -> str:
        """将 Markdown 转换为 HTML（只覆盖报告用到的语法）"""
        out: List[str] = []
        in_table = False

        for line in markdown.splitlines():
            if line.startswith("|"):
                cells = [c.strip() for c in line.strip("|").split("|")]
                if all(re.fullmatch(r"-+", c) for c in cells):
                    continue
                if not in_table:
                    out.append("<table>")
                    in_table = True
                out.append(
                    "<tr>" + "".join(f"<td>{self._inline_html(c)}</td>" for c in cells) + "</tr>"
                )
                continue
            if in_table:
                out.append("</table>")
                in_table = False

            heading = re.match(r"(#{1,6})\s+(.*)", line)
            if heading:
                level = len(heading.group(1))
                out.append(f"<h{level}>{self._inline_html(heading.group(2))}</h{level}>")
            elif line.startswith("> "):
                out.append(f"<blockquote>{self._inline_html(line[2:])}</blockquote>")
            elif line.strip() == "---":
                out.append("<hr>")
            elif line.strip():
                out.append(f"<p>{self._inline_html(line)}</p>")

        if in_table:
            out.append("</table>")

        return "<div class='report'>\n" + "\n".join(out) + "\n</div>"

    def _markdown_to_text(self, markdown: str) -> str:
        """将 Markdown 转换为纯文本"""
        text = markdown
        text = re.sub(r'\*\*(.+?)\*\*', r'\1', text)
        text = re.sub(r'\*(.+?)\*', r'\1', text)
        text = re.sub(r'\[(.+?)\]\(.+?\)', r'\1', text)
        text = re.sub(r'^#{1,6}\s+', '', text, flags=re.MULTILINE)
        text = re.sub(r'^\|[-|\s]+\|$\n?', '', text, flags=re.MULTILINE)
        text = re.sub(r'^\|\s*(.+?)\s*\|$', lambda m: "  ".join(
            c.strip() for c in m.group(1).split("|")
        ), text, flags=re.MULTILINE)
        return text

    def register_section(self, section: ReportSection, position: Optional[int] = None):
        """
        注册自定义分节

        Args:
            section: 分节实例
            position: 插入位置（缺省追加到末尾）
        """
        if position is None:
            self._sections.append(section)
        else:
            self._sections.insert(position, section)


# ==================== JSON 导出 ====================

def build_export_data(report: PortfolioReport) -> ExportData:
    """按配置顺序生成 JSON 导出结构"""
    allocations = report.portfolio.allocations
    assets = {a.ticker: a for a in report.top_assets}

    return ExportData(
        categories=[c.name for c in report.selected_categories],
        tickers=[a.ticker for a in allocations],
        cagr=[a.cagr for a in allocations],
        allocation_percent=[a.allocation for a in allocations],
        expected_return=[a.expected_return for a in allocations],
        source_urls=[
            [s.url for s in assets[a.ticker].sources] if a.ticker in assets else []
            for a in allocations
        ],
        trust_scores=[s.trust_score for s in report.sources],
        report_date=report.metadata.report_date,
    )


# 便捷函数
def create_report_writer() -> ReportWriter:
    """创建报告生成器实例"""
    return ReportWriter()
