"""Chat import flow - parse, match lead, reconcile, persist"""
import logging
from typing import Optional, Tuple

from leadflow.config import settings
from leadflow.core.chat_parser import parse_chat, CHAT_FORMAT_HINT
from leadflow.core.phone import normalize_phone
from leadflow.core.pipeline import first_stage
from leadflow.core.reconciler import reconcile, direction_of
from leadflow.core.temperature import apply_if_automatic
from leadflow.integrations.supabase import LeadRepository, InteractionRepository
from leadflow.models import (
    Lead, Interaction, ParsedChat, PipelineConfig, ReconcileResult,
    ChatImportRequest, ChatImportPreview, ChatImportResult
)

logger = logging.getLogger(__name__)


class ChatParseError(ValueError):
    """Pasted text has no recognizable lead messages"""

    def __init__(self):
        super().__init__(f"No se pudo interpretar el chat.\n{CHAT_FORMAT_HINT}")


def find_lead_by_phone(lead_repo: LeadRepository, phone: str) -> Optional[Lead]:
    """
    Existing lead whose phone matches, ignoring formatting.

    Chat handles saved as contact names carry no digits; those are matched
    against the stored phone text, case-insensitively.
    """
    wanted = normalize_phone(phone)
    handle = (phone or "").strip().lower()
    if not wanted and not handle:
        return None

    for lead in lead_repo.get_leads():
        if wanted:
            if normalize_phone(lead.phone) == wanted:
                return lead
        elif (lead.phone or "").strip().lower() == handle:
            return lead
    return None


def _parse(request: ChatImportRequest) -> ParsedChat:
    chat = parse_chat(request.chat_text, request.my_sender_name or settings.my_sender_name)
    if chat is None:
        raise ChatParseError()
    return chat


def _reconcile_with(
    lead: Optional[Lead],
    chat: ParsedChat,
    interaction_repo: InteractionRepository
) -> ReconcileResult:
    existing = interaction_repo.get_interactions_for_lead(lead.id) if lead else []
    return reconcile(chat.messages, existing, settings.duplicate_tolerance_seconds)


def preview_chat_import(
    request: ChatImportRequest,
    lead_repo: LeadRepository,
    interaction_repo: InteractionRepository
) -> ChatImportPreview:
    """What import_chat would do, without writing"""
    chat = _parse(request)
    lead = find_lead_by_phone(lead_repo, chat.lead_phone)
    result = _reconcile_with(lead, chat, interaction_repo)

    return ChatImportPreview(
        chat=chat,
        existing_lead_id=lead.id if lead else None,
        existing_lead_name=lead.name if lead else None,
        new_messages=len(result.new_messages),
        duplicates=result.duplicates,
    )


def _get_or_create_lead(
    request: ChatImportRequest,
    chat: ParsedChat,
    lead_repo: LeadRepository,
    config: PipelineConfig
) -> Tuple[Lead, bool]:
    lead = find_lead_by_phone(lead_repo, chat.lead_phone)
    if lead:
        return lead, False

    name = (request.lead_name or "").strip() or chat.lead_phone
    business_type = (request.business_type or "").strip() or None
    lead = Lead(
        name=name,
        phone=chat.lead_phone,
        business_type=business_type,
        pipeline_state=first_stage(config).id,
        created_at=chat.date_range.start.astimezone(),
    )
    lead_repo.save_lead(lead)
    logger.info("Created lead %s from chat with %s", lead.id, chat.lead_phone)
    return lead, True


def import_chat(
    request: ChatImportRequest,
    lead_repo: LeadRepository,
    interaction_repo: InteractionRepository,
    config: PipelineConfig
) -> ChatImportResult:
    """
    Import a pasted chat into a lead's timeline.

    Writes one interaction per net-new message, without atomicity. Re-running
    after a partial import is safe because stored messages are detected as
    duplicates.
    """
    chat = _parse(request)
    lead, created = _get_or_create_lead(request, chat, lead_repo, config)
    result = _reconcile_with(None if created else lead, chat, interaction_repo)

    for msg in result.new_messages:
        interaction_repo.add_interaction(Interaction(
            lead_id=lead.id,
            message=msg.message,
            created_at=msg.timestamp.astimezone(),
            direction=direction_of(msg),
        ))

    interactions = interaction_repo.get_interactions_for_lead(lead.id)
    updated = apply_if_automatic(lead, interactions, config)
    if updated.temperature != lead.temperature:
        lead_repo.update_lead(updated)

    logger.info(
        "Imported chat into lead %s: %d new, %d duplicates",
        lead.id, len(result.new_messages), result.duplicates
    )

    return ChatImportResult(
        lead_id=lead.id,
        lead_created=created,
        lead_phone=chat.lead_phone,
        imported=len(result.new_messages),
        duplicates=result.duplicates,
        date_range=chat.date_range,
    )
