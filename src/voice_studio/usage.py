"""Local character-usage tracking.

Counters live on the client side only; the vendor's own quota is never
queried. A request is checked against the limits before any API call.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Optional

from .exceptions import QuotaExceededError
from .internal.config import get_config_value

logger = logging.getLogger(__name__)


def _today() -> date:
    return date.today()


def _day_key(day: date) -> str:
    return day.isoformat()


def _month_key(day: date) -> str:
    return day.strftime("%Y-%m")


@dataclass
class UsageCounter:
    count: int
    period: str


@dataclass
class UsageStats:
    daily: UsageCounter = field(default_factory=lambda: UsageCounter(0, _day_key(_today())))
    monthly: UsageCounter = field(default_factory=lambda: UsageCounter(0, _month_key(_today())))

    def rollover(self, today: Optional[date] = None) -> bool:
        """Reset counters whose day or month has passed. Returns True if anything reset."""
        today = today or _today()
        changed = False
        if self.daily.period != _day_key(today):
            logger.debug(f"New day {today}, resetting daily usage ({self.daily.count} chars)")
            self.daily = UsageCounter(0, _day_key(today))
            changed = True
        if self.monthly.period != _month_key(today):
            logger.debug(f"New month {_month_key(today)}, resetting monthly usage ({self.monthly.count} chars)")
            self.monthly = UsageCounter(0, _month_key(today))
            changed = True
        return changed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "daily": {"count": self.daily.count, "date": self.daily.period},
            "monthly": {"count": self.monthly.count, "month": self.monthly.period},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UsageStats":
        stats = cls()
        daily = data.get("daily") or {}
        monthly = data.get("monthly") or {}
        if "date" in daily:
            stats.daily = UsageCounter(int(daily.get("count", 0)), str(daily["date"]))
        if "month" in monthly:
            stats.monthly = UsageCounter(int(monthly.get("count", 0)), str(monthly["month"]))
        return stats


class UsageTracker:
    def __init__(
        self,
        stats: Optional[UsageStats] = None,
        daily_limit: Optional[int] = None,
        monthly_limit: Optional[int] = None,
    ) -> None:
        self.stats = stats or UsageStats()
        self.daily_limit = int(daily_limit if daily_limit is not None else get_config_value("daily_char_limit"))
        self.monthly_limit = int(
            monthly_limit if monthly_limit is not None else get_config_value("monthly_char_limit")
        )
        self.stats.rollover()

    @property
    def daily_remaining(self) -> int:
        return max(self.daily_limit - self.stats.daily.count, 0)

    def check(self, characters: int) -> None:
        """Raise QuotaExceededError if ``characters`` more would pass a limit."""
        self.stats.rollover()
        if self.stats.daily.count + characters > self.daily_limit:
            raise QuotaExceededError(
                f"Daily limit reached ({self.daily_limit} characters)",
                limit=self.daily_limit,
                used=self.stats.daily.count,
                requested=characters,
            )
        # 0 means no monthly cap
        if self.monthly_limit and self.stats.monthly.count + characters > self.monthly_limit:
            raise QuotaExceededError(
                f"Monthly limit reached ({self.monthly_limit} characters)",
                limit=self.monthly_limit,
                used=self.stats.monthly.count,
                requested=characters,
                period="monthly",
            )

    def record(self, characters: int) -> None:
        self.stats.rollover()
        self.stats.daily.count += characters
        self.stats.monthly.count += characters
        logger.debug(f"Recorded {characters} chars, daily total {self.stats.daily.count}/{self.daily_limit}")

    def summary(self) -> Dict[str, Any]:
        data = self.stats.to_dict()
        data["limits"] = {"daily": self.daily_limit, "monthly": self.monthly_limit}
        data["daily_remaining"] = self.daily_remaining
        return data
