"""WhatsApp chat parser - Turn pasted chat exports into timestamped messages"""
import re
from datetime import datetime
from typing import List, Optional

from leadflow.models import ParsedMessage, ParsedChat, DateRange


# [2:55 PM, 1/18/2026] +1 (714) 438-9132: Message text
MESSAGE_RE = re.compile(
    r"^\[(\d{1,2}):(\d{2})\s(AM|PM),\s(\d{1,2})/(\d{1,2})/(\d{4})\]\s(.+?):\s(.+)$"
)

CHAT_FORMAT_HINT = (
    "Formato esperado: [H:MM AM/PM, M/D/YYYY] Remitente: Mensaje\n"
    "Ejemplo: [2:55 PM, 1/18/2026] +1 (714) 438-9132: Hola, quiero información"
)


def _to_24h(hour: int, period: str) -> int:
    if period == "PM" and hour != 12:
        return hour + 12
    if period == "AM" and hour == 12:
        return 0
    return hour


def _parse_line(line: str, my_sender_name: str) -> Optional[ParsedMessage]:
    match = MESSAGE_RE.match(line)
    if not match:
        return None

    hour, minute, period, month, day, year, sender, text = match.groups()
    try:
        timestamp = datetime(
            int(year), int(month), int(day), _to_24h(int(hour), period), int(minute)
        )
    except ValueError:
        # Looks like a header but the date is impossible
        return None

    return ParsedMessage(
        timestamp=timestamp,
        sender=sender,
        message=text,
        is_from_lead=sender.lower() != my_sender_name.lower(),
    )


def parse_chat(text: str, my_sender_name: str = "Miwebya") -> Optional[ParsedChat]:
    """
    Parse a WhatsApp chat export.

    Lines that don't start a new message are appended to the previous one,
    so multi-line bubbles survive. The first sender other than
    my_sender_name (case-insensitive) is taken as the lead's phone.

    Returns None when no lead sender or no message could be found.
    """
    messages: List[ParsedMessage] = []
    lead_phone: Optional[str] = None
    current: Optional[ParsedMessage] = None

    for line in text.split("\n"):
        line = line.strip()
        if not line:
            continue

        parsed = _parse_line(line, my_sender_name)
        if parsed:
            if current:
                messages.append(current)
            if parsed.is_from_lead and lead_phone is None:
                lead_phone = parsed.sender
            current = parsed
        elif current:
            current.message += "\n" + line

    if current:
        messages.append(current)

    if not lead_phone or not messages:
        return None

    messages.sort(key=lambda m: m.timestamp)
    lead_count = sum(1 for m in messages if m.is_from_lead)

    return ParsedChat(
        lead_phone=lead_phone,
        messages=messages,
        date_range=DateRange(start=messages[0].timestamp, end=messages[-1].timestamp),
        lead_message_count=lead_count,
        my_message_count=len(messages) - lead_count,
    )
