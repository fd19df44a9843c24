"""Import reconciliation - Drop parsed messages already present in a lead's history"""
from typing import Iterable, List

from leadflow.models import Direction, Interaction, ParsedMessage, ReconcileResult


DEFAULT_TOLERANCE_SECONDS = 60


def direction_of(message: ParsedMessage) -> Direction:
    """Incoming when the lead wrote it, outgoing otherwise"""
    return Direction.INCOMING if message.is_from_lead else Direction.OUTGOING


def is_duplicate(
    message: ParsedMessage,
    interaction: Interaction,
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS
) -> bool:
    """
    Same message when timestamps are within the tolerance window, trimmed
    texts are equal and the direction matches.
    """
    # .timestamp() treats naive datetimes as local time
    delta = abs(message.timestamp.timestamp() - interaction.created_at.timestamp())
    return (
        delta < tolerance_seconds
        and message.message.strip() == interaction.message.strip()
        and direction_of(message) == interaction.direction
    )


def reconcile(
    parsed_messages: Iterable[ParsedMessage],
    existing_interactions: Iterable[Interaction],
    tolerance_seconds: int = DEFAULT_TOLERANCE_SECONDS
) -> ReconcileResult:
    """Split parsed messages into net-new ones and a duplicate count"""
    existing = list(existing_interactions)
    new_messages: List[ParsedMessage] = []
    duplicates = 0

    for message in parsed_messages:
        if any(is_duplicate(message, i, tolerance_seconds) for i in existing):
            duplicates += 1
        else:
            new_messages.append(message)

    return ReconcileResult(new_messages=new_messages, duplicates=duplicates)
