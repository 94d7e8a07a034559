"""
KPI cards for the support dashboard, built from plain COUNT queries.
"""
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from supportdash.models.session_message import SessionMessage
from supportdash.models.survey import Survey
from supportdash.models.ticket import Ticket
from supportdash.models.user import User
from supportdash.schemas.analytics import KpiStat
from supportdash.services.metrics import round_half_up

PLACEHOLDER_VALUE = "—"
PLACEHOLDER_DESCRIPTION = "Configura la base de datos para ver datos reales"

COUNT_KEYS = (
    "total_users", "users_this_week", "users_last_week", "users_today", "users_yesterday",
    "total_messages", "messages_this_week", "messages_last_week", "user_messages", "agent_messages",
    "total_conversations", "conversations_this_week", "conversations_last_week",
    "total_tickets", "tickets_this_week", "tickets_last_week",
    "total_surveys", "surveys_completed",
)


def get_date_ranges(now: Optional[datetime] = None) -> Dict[str, datetime]:
    now = now or datetime.now()
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week_start = today_start - timedelta(days=7)
    return {
        "today_start": today_start,
        "yesterday_start": today_start - timedelta(days=1),
        "week_start": week_start,
        "last_week_start": week_start - timedelta(days=7),
    }


def calculate_change(current: int, previous: int):
    """Percentage change, returned as (change, change_type)."""
    if previous == 0:
        return (100, "positive") if current > 0 else (0, "neutral")
    change = (current - previous) / previous * 100
    change_type = "positive" if change > 0 else "negative" if change < 0 else "neutral"
    return round_half_up(change, 1), change_type


def format_number(num: int) -> str:
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1_000:
        return f"{num / 1_000:.1f}K"
    return str(num)


def count_rows(db: Session, model, *criteria) -> int:
    return db.query(func.count(model.id)).filter(*criteria).scalar() or 0


def collect_counts(db: Session, ranges: Dict[str, datetime]) -> Dict[str, int]:
    week, last_week = ranges["week_start"], ranges["last_week_start"]
    today, yesterday = ranges["today_start"], ranges["yesterday_start"]
    starts = SessionMessage.is_message_start.is_(True)

    return {
        # Users
        "total_users": count_rows(db, User),
        "users_this_week": count_rows(db, User, User.created_at >= week),
        "users_last_week": count_rows(db, User, User.created_at >= last_week, User.created_at < week),
        "users_today": count_rows(db, User, User.created_at >= today),
        "users_yesterday": count_rows(db, User, User.created_at >= yesterday, User.created_at < today),

        # Messages
        "total_messages": count_rows(db, SessionMessage),
        "messages_this_week": count_rows(db, SessionMessage, SessionMessage.sent_at >= week),
        "messages_last_week": count_rows(db, SessionMessage, SessionMessage.sent_at >= last_week, SessionMessage.sent_at < week),
        "user_messages": count_rows(db, SessionMessage, SessionMessage.role == "user"),
        "agent_messages": count_rows(db, SessionMessage, SessionMessage.role == "agent"),

        # Conversations (first message of a session)
        "total_conversations": count_rows(db, SessionMessage, starts),
        "conversations_this_week": count_rows(db, SessionMessage, starts, SessionMessage.sent_at >= week),
        "conversations_last_week": count_rows(db, SessionMessage, starts, SessionMessage.sent_at >= last_week, SessionMessage.sent_at < week),

        # Tickets
        "total_tickets": count_rows(db, Ticket),
        "tickets_this_week": count_rows(db, Ticket, Ticket.created_at >= week),
        "tickets_last_week": count_rows(db, Ticket, Ticket.created_at >= last_week, Ticket.created_at < week),

        # Surveys
        "total_surveys": count_rows(db, Survey),
        "surveys_completed": count_rows(db, Survey, Survey.survey.isnot(None)),
    }


def build_kpis(c: Dict[str, int]) -> List[KpiStat]:
    total_users = c["total_users"]
    total_messages = c["total_messages"]

    avg_messages_per_user = int(round_half_up(total_messages / total_users)) if total_users > 0 else 0
    response_rate = int(round_half_up(c["agent_messages"] / total_messages * 100)) if total_messages > 0 else 0

    # N0 = resolved by the bot, N1 = escalated to a ticket
    attentions = c["total_conversations"]
    attentions_n0 = max(0, c["total_conversations"] - c["total_tickets"])
    attentions_n1 = c["total_tickets"]

    users_change = calculate_change(c["users_this_week"], c["users_last_week"])
    users_today_change = calculate_change(c["users_today"], c["users_yesterday"])
    messages_change = calculate_change(c["messages_this_week"], c["messages_last_week"])
    conversations_change = calculate_change(c["conversations_this_week"], c["conversations_last_week"])
    tickets_change = calculate_change(c["tickets_this_week"], c["tickets_last_week"])

    def kpi(id, title, value, change, icon, description, category):
        return KpiStat(
            id=id,
            title=title,
            value=value,
            change=change[0],
            change_type=change[1],
            icon=icon,
            description=description,
            category=category,
        )

    neutral = (0, "neutral")
    return [
        # Attentions: historical totals, no comparison
        kpi("cantidad-atenciones", "Cantidad de atenciones", format_number(attentions), neutral,
            "support_agent", "Total histórico desde el inicio", "atenciones"),
        kpi("atenciones-n0", "Cantidad de atenciones finalizadas en N0", format_number(attentions_n0), neutral,
            "check_circle", "Resueltas sin escalar • Histórico", "atenciones"),
        kpi("atenciones-n1", "Cantidad de atenciones derivadas a N1", format_number(attentions_n1), neutral,
            "escalator_warning", "Escaladas a ticket • Histórico", "atenciones"),

        kpi("total-users", "Usuarios Totales", format_number(total_users), users_change,
            "people", f"{format_number(c['users_this_week'])} nuevos esta semana", "users"),
        kpi("users-today", "Usuarios Nuevos Hoy", format_number(c["users_today"]), users_today_change,
            "person_add", f"{format_number(c['users_yesterday'])} ayer", "users"),

        kpi("total-messages", "Mensajes Totales", format_number(total_messages), messages_change,
            "chat", f"{format_number(c['messages_this_week'])} esta semana", "messages"),
        kpi("conversations", "Conversaciones", format_number(c["total_conversations"]), conversations_change,
            "forum", f"{format_number(c['conversations_this_week'])} iniciadas esta semana", "messages"),
        kpi("avg-messages", "Promedio Msgs/Usuario", avg_messages_per_user, neutral,
            "analytics", f"{format_number(c['user_messages'])} de usuarios, {format_number(c['agent_messages'])} de agente", "messages"),
        kpi("response-rate", "Tasa de Respuesta", f"{response_rate}%",
            (0, "positive" if response_rate >= 50 else "negative"),
            "speed", "Mensajes del agente vs total", "messages"),

        kpi("total-tickets", "Tickets Creados", format_number(c["total_tickets"]), tickets_change,
            "confirmation_number", f"{format_number(c['tickets_this_week'])} esta semana", "tickets"),

        kpi("total-surveys", "Encuestas", format_number(c["total_surveys"]), neutral,
            "poll", f"{format_number(c['surveys_completed'])} completadas", "surveys"),
    ]


def get_stats(db: Session, now: Optional[datetime] = None) -> List[KpiStat]:
    return build_kpis(collect_counts(db, get_date_ranges(now)))


def placeholder_kpis() -> List[KpiStat]:
    """Same cards with placeholder values, shown while no database is configured."""
    return [
        kpi.model_copy(update={
            "value": PLACEHOLDER_VALUE,
            "change": 0,
            "change_type": "neutral",
            "description": PLACEHOLDER_DESCRIPTION,
        })
        for kpi in build_kpis(dict.fromkeys(COUNT_KEYS, 0))
    ]
