from datetime import datetime

import pytest

from supportdash.models.session_message import SessionMessage
from supportdash.models.survey import Survey
from supportdash.models.ticket import Ticket
from supportdash.models.user import User
from supportdash.services.stats_engine import (
    calculate_change,
    collect_counts,
    format_number,
    get_date_ranges,
    get_stats,
    placeholder_kpis,
)

NOW = datetime(2024, 6, 15, 12, 0)


@pytest.fixture
def seeded(db_session):
    db_session.add_all([
        User(id=1, phone="111", created_at=datetime(2024, 6, 15, 9, 0)),   # today
        User(id=2, phone="222", created_at=datetime(2024, 6, 14, 10, 0)),  # yesterday
        User(id=3, phone="333", created_at=datetime(2024, 6, 5, 10, 0)),   # last week
        User(id=4, phone="444", created_at=datetime(2024, 4, 1, 10, 0)),   # older
    ])
    db_session.add_all([
        SessionMessage(user_id=1, phone="111", message="hola", role="user", is_message_start=True, sent_at=datetime(2024, 6, 15, 9, 1)),
        SessionMessage(user_id=1, phone="111", message="¿en qué te ayudo?", role="agent", is_message_start=False, sent_at=datetime(2024, 6, 15, 9, 2)),
        SessionMessage(user_id=3, phone="333", message="consulta", role="user", is_message_start=True, sent_at=datetime(2024, 6, 5, 10, 1)),
        SessionMessage(user_id=3, phone="333", message="respuesta", role="agent", is_message_start=False, sent_at=datetime(2024, 6, 5, 10, 2)),
        SessionMessage(user_id=3, phone="333", message="te derivo", role="agent", is_message_start=False, sent_at=datetime(2024, 6, 5, 10, 3)),
    ])
    db_session.add(Ticket(user_id=3, phone="333", freshdesk_ticket_id="FD-1", subject="Reclamo", created_at=datetime(2024, 6, 5, 11, 0)))
    db_session.add_all([
        Survey(user_id=1, survey="5"),
        Survey(user_id=3, survey=None),
    ])
    db_session.commit()
    return db_session


def test_date_ranges():
    ranges = get_date_ranges(NOW)

    assert ranges["today_start"] == datetime(2024, 6, 15)
    assert ranges["yesterday_start"] == datetime(2024, 6, 14)
    assert ranges["week_start"] == datetime(2024, 6, 8)
    assert ranges["last_week_start"] == datetime(2024, 6, 1)
    assert set(ranges) == {"today_start", "yesterday_start", "week_start", "last_week_start"}


@pytest.mark.parametrize("current, previous, expected", [
    (5, 0, (100, "positive")),
    (0, 0, (0, "neutral")),
    (2, 1, (100.0, "positive")),
    (2, 3, (-33.3, "negative")),
    (4, 4, (0.0, "neutral")),
])
def test_calculate_change(current, previous, expected):
    assert calculate_change(current, previous) == expected


def test_format_number():
    assert format_number(999) == "999"
    assert format_number(1500) == "1.5K"
    assert format_number(2_340_000) == "2.3M"


def test_collect_counts(seeded):
    counts = collect_counts(seeded, get_date_ranges(NOW))

    assert counts["total_users"] == 4
    assert counts["users_this_week"] == 2
    assert counts["users_last_week"] == 1
    assert counts["users_today"] == 1
    assert counts["users_yesterday"] == 1

    assert counts["total_messages"] == 5
    assert counts["messages_this_week"] == 2
    assert counts["messages_last_week"] == 3
    assert counts["user_messages"] == 2
    assert counts["agent_messages"] == 3

    assert counts["total_conversations"] == 2
    assert counts["conversations_this_week"] == 1
    assert counts["conversations_last_week"] == 1

    assert counts["total_tickets"] == 1
    assert counts["tickets_this_week"] == 0
    assert counts["tickets_last_week"] == 1

    assert counts["total_surveys"] == 2
    assert counts["surveys_completed"] == 1


def test_kpis(seeded):
    kpis = {k.id: k for k in get_stats(seeded, now=NOW)}

    assert len(kpis) == 11
    assert kpis["cantidad-atenciones"].value == "2"
    assert kpis["atenciones-n0"].value == "1"
    assert kpis["atenciones-n1"].value == "1"

    assert kpis["total-users"].value == "4"
    assert (kpis["total-users"].change, kpis["total-users"].change_type) == (100, "positive")
    assert kpis["users-today"].change_type == "neutral"

    assert kpis["total-messages"].change == -33.3
    assert kpis["total-messages"].change_type == "negative"
    assert kpis["avg-messages"].value == 1
    assert kpis["response-rate"].value == "60%"
    assert kpis["response-rate"].change_type == "positive"

    assert kpis["total-tickets"].change == -100
    assert kpis["total-surveys"].description == "1 completadas"


def test_empty_database(db_session):
    kpis = {k.id: k for k in get_stats(db_session, now=NOW)}

    assert kpis["avg-messages"].value == 0
    assert kpis["response-rate"].value == "0%"
    assert kpis["response-rate"].change_type == "negative"


def test_placeholders():
    kpis = placeholder_kpis()

    assert len(kpis) == 11
    assert all(k.value == "—" and k.change_type == "neutral" for k in kpis)
