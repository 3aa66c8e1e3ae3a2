"""
系统时间适配器 - 实现 TimePort
"""

from datetime import datetime, timezone as dt_timezone
from typing import Optional

from foliosight.ports.interfaces import TimePort


class SystemTimeAdapter(TimePort):
    """
    系统时间适配器

    实现 TimePort 接口，提供时间相关服务。
    """

    def __init__(self, use_utc: bool = False):
        """
        初始化适配器

        Args:
            use_utc: 是否使用 UTC（默认使用本地时间）
        """
        self.use_utc = use_utc

    def get_current_datetime(self) -> datetime:
        """获取当前日期时间"""
        if self.use_utc:
            return datetime.now(dt_timezone.utc)
        return datetime.now()

    def get_formatted_datetime(self, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
        """获取格式化的日期时间字符串"""
        return self.get_current_datetime().strftime(fmt)


class FixedTimeAdapter(TimePort):
    """固定时间适配器，用于生成可复现的报告"""

    def __init__(self, fixed: datetime):
        self.fixed = fixed

    def get_current_datetime(self) -> datetime:
        return self.fixed

    def get_formatted_datetime(self, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
        return self.fixed.strftime(fmt)

    @classmethod
    def from_iso(cls, value: str, tz: Optional[dt_timezone] = None) -> "FixedTimeAdapter":
        fixed = datetime.fromisoformat(value)
        if tz is not None:
            fixed = fixed.replace(tzinfo=tz)
        return cls(fixed)
