"""Time-window selector: ``week`` / ``month`` / ``all`` or an explicit date range."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple

from errors import ValidationError

PERIOD_DAYS = {"week": 7, "month": 30}
PERIODS = ("week", "month", "all")


def _parse_bound(name: str, value: str) -> date:
    text = value.strip()
    try:
        if len(text) > 10:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
            if parsed.tzinfo is not None:
                parsed = parsed.astimezone(timezone.utc)
            return parsed.date()
        return date.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(
            f"{name} must be an ISO-8601 date or datetime.", fields=[name], details=str(e)
        ) from e


@dataclass(frozen=True)
class WindowSelector:
    """Exactly one of a named period or an explicit inclusive range."""

    period: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @classmethod
    def parse(
        cls,
        period: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> "WindowSelector":
        period = (period or "").strip() or None
        start_date = start_date or None
        end_date = end_date or None

        if period is not None and period not in PERIODS:
            raise ValidationError(
                f"period must be one of {', '.join(PERIODS)}.", fields=["period"], details=period
            )
        if (start_date is None) != (end_date is None):
            raise ValidationError(
                "Both startDate and endDate must be provided if either is used.",
                fields=["startDate", "endDate"],
            )
        if period is not None and start_date is not None:
            raise ValidationError(
                "Supply either period or startDate/endDate, not both.",
                fields=["period", "startDate", "endDate"],
            )
        if start_date is None:
            return cls(period=period or "all")

        start = _parse_bound("startDate", start_date)
        end = _parse_bound("endDate", end_date)
        if start > end:
            raise ValidationError(
                "startDate must be before or equal to endDate.",
                fields=["startDate", "endDate"],
                details={"startDate": start.isoformat(), "endDate": end.isoformat()},
            )
        return cls(start_date=start, end_date=end)

    def resolve(self, now: Optional[datetime] = None) -> Tuple[Optional[date], Optional[date]]:
        """Inclusive ``(start, end)`` bounds on entry_date; ``(None, None)`` is unbounded."""
        if self.period is None:
            return self.start_date, self.end_date
        if self.period == "all":
            return None, None
        now = now or datetime.now()
        start = (now - timedelta(days=PERIOD_DAYS[self.period])).date()
        return start, now.date()

    def describe(self) -> str:
        if self.period is not None:
            return self.period
        return f"{self.start_date.isoformat()}..{self.end_date.isoformat()}"
