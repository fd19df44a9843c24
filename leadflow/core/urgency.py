"""Urgency - Classify leads by their scheduled next contact"""
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, Optional

from leadflow.models import Lead, SmsContactStatus, Urgency


URGENCY_LABELS = {
    Urgency.OVERDUE: "Vencido",
    Urgency.TODAY: "Hoy",
    Urgency.UPCOMING: "Futuro",
    Urgency.NO_ACTION: "Sin acción",
}

SPANISH_MONTHS = ["ene", "feb", "mar", "abr", "may", "jun", "jul", "ago", "sep", "oct", "nov", "dic"]


def _local_day(value: datetime) -> date:
    """Calendar day in local time; naive datetimes are already local"""
    if value.tzinfo is not None:
        value = value.astimezone()
    return value.date()


def classify(lead: Lead, today: Optional[date] = None) -> Urgency:
    """
    Urgency bucket for a lead.

    Leads without a next contact date are "no-action", except SMS-blocked
    leads which count as "upcoming" so they don't raise alerts.
    Only the calendar day matters, time of day is ignored.
    """
    if lead.next_contact_date is None:
        if lead.sms_contact_status == SmsContactStatus.BLOQUEADO:
            return Urgency.UPCOMING
        return Urgency.NO_ACTION

    today = today or date.today()
    contact_day = _local_day(lead.next_contact_date)

    if contact_day < today:
        return Urgency.OVERDUE
    if contact_day == today:
        return Urgency.TODAY
    return Urgency.UPCOMING


def count_by_urgency(leads: Iterable[Lead], today: Optional[date] = None) -> Dict[str, int]:
    """Count leads per urgency bucket (every bucket present)"""
    today = today or date.today()
    counts = {u.value: 0 for u in Urgency}
    for lead in leads:
        counts[classify(lead, today).value] += 1
    return counts


def count_blocked(leads: Iterable[Lead]) -> int:
    """Leads whose SMS channel is blocked"""
    return sum(1 for lead in leads if lead.sms_contact_status == SmsContactStatus.BLOQUEADO)


def urgency_label(urgency: Urgency) -> str:
    """Spanish display label"""
    return URGENCY_LABELS[urgency]


def format_short_date(value: Optional[datetime], today: Optional[date] = None) -> str:
    """Short display date: Hoy, Mañana or '12 dic'"""
    if value is None:
        return "—"
    today = today or date.today()
    day = _local_day(value)
    if day == today:
        return "Hoy"
    if day == today + timedelta(days=1):
        return "Mañana"
    return f"{day.day} {SPANISH_MONTHS[day.month - 1]}"
