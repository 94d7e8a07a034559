from datetime import date, datetime

import pytest

from supportdash.models.session_message import SessionMessage
from supportdash.models.ticket import Ticket
from supportdash.models.user import User
from supportdash.services.analytics_engine import (
    build_funnel,
    empty_analytics,
    format_day_label,
    get_analytics,
    last_n_days,
)

NOW = datetime(2024, 6, 15, 12, 0)  # a Saturday


def message(user_id, sent_at, start=False, role="user"):
    return SessionMessage(user_id=user_id, phone=str(user_id), message="m", role=role, is_message_start=start, sent_at=sent_at)


@pytest.fixture
def seeded(db_session):
    db_session.add_all([
        User(id=1, phone="1", created_at=datetime(2024, 6, 15, 8, 0)),
        User(id=2, phone="2", created_at=datetime(2024, 6, 10, 8, 0)),
        User(id=3, phone="3", created_at=datetime(2024, 5, 1, 8, 0)),  # outside the window
    ])
    db_session.add_all([
        message(1, datetime(2024, 6, 15, 9, 5), start=True),
        message(1, datetime(2024, 6, 15, 9, 6), role="agent"),
        message(2, datetime(2024, 6, 10, 21, 0), start=True),
        message(2, datetime(2024, 6, 10, 21, 30), role="agent"),
        message(3, datetime(2024, 5, 1, 9, 0), start=True),  # outside the window
    ])
    db_session.add(Ticket(user_id=2, phone="2", freshdesk_ticket_id="FD-9", subject="Reclamo", created_at=datetime(2024, 6, 10, 22, 0)))
    db_session.commit()
    return db_session


def test_last_n_days():
    days = last_n_days(7, NOW)

    assert days[0] == date(2024, 6, 9)
    assert days[-1] == date(2024, 6, 15)
    assert len(days) == 7


def test_format_day_label():
    assert format_day_label(date(2024, 6, 9)) == "Dom 9"
    assert format_day_label(date(2024, 6, 12)) == "Mié 12"
    assert format_day_label(date(2024, 6, 15)) == "Sáb 15"


@pytest.mark.parametrize("conversations, tickets, expected", [
    (10, 3, (7, 3, 70, 30)),
    (3, 5, (0, 5, 0, 167)),
    (3, 1, (2, 1, 67, 33)),
    (0, 0, (0, 0, 0, 0)),
])
def test_build_funnel(conversations, tickets, expected):
    f = build_funnel(conversations, tickets)

    assert (f.n0, f.n1, f.n0_percentage, f.n1_percentage) == expected
    assert f.total == conversations


def test_get_analytics(seeded):
    data = get_analytics(seeded, NOW)

    assert data.funnel.total == 3
    assert data.funnel.n1 == 1
    assert data.funnel.n0 == 2

    daily = {d.date: d for d in data.daily_metrics}
    assert list(daily) == [f"2024-06-{day:02d}" for day in range(9, 16)]
    assert daily["2024-06-15"].label == "Sáb 15"
    assert (daily["2024-06-15"].messages, daily["2024-06-15"].conversations, daily["2024-06-15"].users) == (2, 1, 1)
    assert (daily["2024-06-10"].messages, daily["2024-06-10"].tickets, daily["2024-06-10"].users) == (2, 1, 1)
    assert daily["2024-06-12"].messages == 0

    hours = {h.hour: h.messages for h in data.hourly_distribution}
    assert len(hours) == 24
    assert hours[9] == 2
    assert hours[21] == 2
    assert sum(hours.values()) == 4


def test_empty_analytics():
    data = empty_analytics(NOW)

    assert data.funnel.total == 0
    assert len(data.daily_metrics) == 7
    assert all(d.messages == 0 for d in data.daily_metrics)
    assert [h.hour for h in data.hourly_distribution] == list(range(24))
