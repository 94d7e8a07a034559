"""
Chart series for the dashboard: the N0/N1 funnel, per-day activity over the
last week and messages per hour of day.
"""
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from supportdash.models.session_message import SessionMessage
from supportdash.models.ticket import Ticket
from supportdash.models.user import User
from supportdash.schemas.analytics import AnalyticsData, DailyMetric, FunnelData, HourlyBucket
from supportdash.services.metrics import round_half_up
from supportdash.services.stats_engine import count_rows

DAYS = 7
WEEKDAY_LABELS = ["Lun", "Mar", "Mié", "Jue", "Vie", "Sáb", "Dom"]  # date.weekday() order


def last_n_days(n: int, now: Optional[datetime] = None) -> List[date]:
    """The last `n` calendar days, oldest first, ending today."""
    today = (now or datetime.now()).date()
    return [today - timedelta(days=i) for i in range(n - 1, -1, -1)]


def format_day_label(day: date) -> str:
    return f"{WEEKDAY_LABELS[day.weekday()]} {day.day}"


def build_funnel(total_conversations: int, total_tickets: int) -> FunnelData:
    n1 = total_tickets
    n0 = max(0, total_conversations - n1)

    def pct(part):
        return int(round_half_up(part / total_conversations * 100)) if total_conversations > 0 else 0

    return FunnelData(n0=n0, n1=n1, total=total_conversations, n0_percentage=pct(n0), n1_percentage=pct(n1))


def _per_day(stamps: Iterable[datetime]) -> Counter:
    return Counter(s.date() for s in stamps if s is not None)


def build_daily_metrics(days: List[date], messages, conversations, users, tickets) -> List[DailyMetric]:
    by_day = [_per_day(x) for x in (messages, conversations, users, tickets)]
    return [
        DailyMetric(
            date=day.isoformat(),
            label=format_day_label(day),
            messages=by_day[0][day],
            conversations=by_day[1][day],
            users=by_day[2][day],
            tickets=by_day[3][day],
        )
        for day in days
    ]


def build_hourly_distribution(messages: Iterable[datetime]) -> List[HourlyBucket]:
    per_hour = Counter(s.hour for s in messages if s is not None)
    return [HourlyBucket(hour=hour, messages=per_hour[hour]) for hour in range(24)]


def _timestamps(db: Session, column, start: datetime, end: datetime, *criteria) -> List[datetime]:
    rows = db.query(column).filter(column >= start, column < end, *criteria).all()
    return [row[0] for row in rows]


def get_analytics(db: Session, now: Optional[datetime] = None) -> AnalyticsData:
    days = last_n_days(DAYS, now)
    start = datetime.combine(days[0], datetime.min.time())
    end = datetime.combine(days[-1] + timedelta(days=1), datetime.min.time())
    starts = SessionMessage.is_message_start.is_(True)

    funnel = build_funnel(count_rows(db, SessionMessage, starts), count_rows(db, Ticket))

    messages = _timestamps(db, SessionMessage.sent_at, start, end)
    conversations = _timestamps(db, SessionMessage.sent_at, start, end, starts)
    users = _timestamps(db, User.created_at, start, end)
    tickets = _timestamps(db, Ticket.created_at, start, end)

    return AnalyticsData(
        funnel=funnel,
        daily_metrics=build_daily_metrics(days, messages, conversations, users, tickets),
        # hours of the messages from the same week
        hourly_distribution=build_hourly_distribution(messages),
    )


def empty_analytics(now: Optional[datetime] = None) -> AnalyticsData:
    """Zeroed series, shown while no database is configured."""
    return AnalyticsData(
        funnel=build_funnel(0, 0),
        daily_metrics=build_daily_metrics(last_n_days(DAYS, now), [], [], [], []),
        hourly_distribution=build_hourly_distribution([]),
    )
