"""Leads API Routes"""
import logging
from collections import Counter
from datetime import date
from typing import Iterable, Optional, List
from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import ValidationError

from leadflow.config import settings
from leadflow.api.dependencies import get_lead_repo, get_interaction_repo, get_pipeline_config
from leadflow.integrations.supabase import LeadRepository, InteractionRepository
from leadflow.core import progression, urgency
from leadflow.core.exporter import export_lead_jsonl, export_filename
from leadflow.core.pipeline import first_stage, stage_name, class_of, progress_percent
from leadflow.core.progression import StageTransition, TransitionError
from leadflow.core.phone import format_us_phone
from leadflow.core.temperature import apply_if_automatic, set_manual, clear_manual
from leadflow.core.timeline import last_interaction, elapsed_time, is_over_threshold
from leadflow.models import (
    Lead, Interaction, LeadCreate, LeadUpdate, LeadResponse, LeadListResponse, LeadSummary,
    NextContactSchedule, TemperatureOverride, SmsStatusChange, InteractionCreate,
    CloseOutcome, PipelineConfig, Urgency
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leads", tags=["leads"])


def to_response(
    lead: Lead,
    config: PipelineConfig,
    interactions: Iterable[Interaction],
    today: Optional[date] = None
) -> LeadResponse:
    """
    Lead plus everything derived from it and the active pipeline.

    Automatic temperature is re-derived here, so a reconfigured pipeline shows
    up on the next read without any write.
    """
    lead = apply_if_automatic(lead, interactions, config)
    stage_class = class_of(config, lead.pipeline_state)
    bucket = urgency.classify(lead, today)
    return LeadResponse(
        **lead.model_dump(),
        stage_name=stage_name(config, lead.pipeline_state),
        stage_class=stage_class.value if stage_class else None,
        urgency=bucket,
        urgency_label=urgency.urgency_label(bucket),
        next_contact_label=urgency.format_short_date(lead.next_contact_date, today),
        progress=progress_percent(config, lead.pipeline_state),
    )


def respond(
    lead: Lead,
    config: PipelineConfig,
    interaction_repo: InteractionRepository,
    today: Optional[date] = None
) -> LeadResponse:
    """to_response with the lead's stored interactions"""
    return to_response(lead, config, interaction_repo.get_interactions_for_lead(lead.id), today)


def get_lead_or_404(lead_id: str, repo: LeadRepository) -> Lead:
    lead = repo.get_lead_by_id(lead_id)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead no encontrado")
    return lead


def save_or_500(lead: Lead, repo: LeadRepository) -> None:
    if not repo.update_lead(lead):
        raise HTTPException(status_code=500, detail="Error al actualizar lead")


def refresh_temperature(
    lead: Lead,
    config: PipelineConfig,
    lead_repo: LeadRepository,
    interaction_repo: InteractionRepository
) -> Lead:
    """Re-derive the automatic temperature from stored interactions and persist it"""
    interactions = interaction_repo.get_interactions_for_lead(lead.id)
    updated = apply_if_automatic(lead, interactions, config)
    save_or_500(updated, lead_repo)
    return updated


@router.get("", response_model=LeadListResponse)
def list_leads(
    stage: Optional[List[str]] = Query(None),
    urgency_filter: Optional[Urgency] = Query(None, alias="urgency"),
    repo: LeadRepository = Depends(get_lead_repo),
    interaction_repo: InteractionRepository = Depends(get_interaction_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """List leads with derived stage, temperature and urgency"""
    today = date.today()
    leads = [respond(lead, config, interaction_repo, today) for lead in repo.get_leads()]

    if stage:
        leads = [lead for lead in leads if lead.pipeline_state in stage]
    if urgency_filter:
        leads = [lead for lead in leads if lead.urgency == urgency_filter]

    return LeadListResponse(total=len(leads), leads=leads)


@router.get("/summary", response_model=LeadSummary)
def get_summary(repo: LeadRepository = Depends(get_lead_repo)):
    """Dashboard counters over all leads"""
    leads = repo.get_leads()
    return LeadSummary(
        total=len(leads),
        urgency=urgency.count_by_urgency(leads),
        sms_blocked=urgency.count_blocked(leads),
        by_stage=dict(Counter(lead.pipeline_state for lead in leads)),
    )


@router.post("", response_model=LeadResponse, status_code=201)
def create_lead(
    payload: LeadCreate,
    repo: LeadRepository = Depends(get_lead_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """Create a lead in the first pipeline stage; US numbers are stored formatted"""
    data = payload.model_dump()
    phone = format_us_phone(data["phone"])
    if phone.is_valid:
        data["phone"] = phone.formatted

    lead = Lead(**data, pipeline_state=first_stage(config).id)
    repo.save_lead(lead)
    return to_response(lead, config, [])


@router.get("/{lead_id}")
def get_lead(
    lead_id: str,
    repo: LeadRepository = Depends(get_lead_repo),
    interaction_repo: InteractionRepository = Depends(get_interaction_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """Get single lead with time since its last interaction"""
    lead = get_lead_or_404(lead_id, repo)
    interactions = interaction_repo.get_interactions_for_lead(lead_id)
    last = last_interaction(interactions)

    response = to_response(lead, config, interactions).model_dump(mode="json")
    response["last_interaction_at"] = last.created_at if last else None
    response["elapsed_since_last_interaction"] = elapsed_time(last.created_at) if last else None
    response["over_follow_up_threshold"] = (
        is_over_threshold(last.created_at, settings.follow_up_threshold_hours) if last else False
    )
    return response


@router.patch("/{lead_id}", response_model=LeadResponse)
def update_lead(
    lead_id: str,
    updates: LeadUpdate,
    repo: LeadRepository = Depends(get_lead_repo),
    interaction_repo: InteractionRepository = Depends(get_interaction_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """Update descriptive lead fields"""
    lead = get_lead_or_404(lead_id, repo)
    try:
        lead = Lead.model_validate({**lead.model_dump(), **updates.model_dump(exclude_unset=True)})
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    save_or_500(lead, repo)
    return respond(lead, config, interaction_repo)


@router.delete("/{lead_id}")
def delete_lead(lead_id: str, repo: LeadRepository = Depends(get_lead_repo)):
    """Delete a lead and all its interactions"""
    if not repo.delete_lead(lead_id):
        raise HTTPException(status_code=404, detail="Lead no encontrado")
    return {"status": "deleted"}


# ===========================================
# STAGE TRANSITIONS
# ===========================================

def apply_transition(
    transition: StageTransition,
    config: PipelineConfig,
    lead_repo: LeadRepository,
    interaction_repo: InteractionRepository
) -> LeadResponse:
    interaction_repo.add_interaction(transition.audit.to_interaction(transition.lead.id))
    lead = refresh_temperature(transition.lead, config, lead_repo, interaction_repo)
    return respond(lead, config, interaction_repo)


def _transition(action, lead_id: str, lead_repo, interaction_repo, config, *args) -> LeadResponse:
    lead = get_lead_or_404(lead_id, lead_repo)
    try:
        transition = action(lead, config, *args)
    except TransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return apply_transition(transition, config, lead_repo, interaction_repo)


@router.post("/{lead_id}/advance", response_model=LeadResponse)
def advance_lead(
    lead_id: str,
    repo: LeadRepository = Depends(get_lead_repo),
    interaction_repo: InteractionRepository = Depends(get_interaction_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """Advance lead to the next main stage"""
    return _transition(progression.advance, lead_id, repo, interaction_repo, config)


@router.post("/{lead_id}/pause", response_model=LeadResponse)
def pause_lead(
    lead_id: str,
    repo: LeadRepository = Depends(get_lead_repo),
    interaction_repo: InteractionRepository = Depends(get_interaction_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """Move lead to follow-up"""
    return _transition(progression.pause, lead_id, repo, interaction_repo, config)


@router.post("/{lead_id}/resume", response_model=LeadResponse)
def resume_lead(
    lead_id: str,
    repo: LeadRepository = Depends(get_lead_repo),
    interaction_repo: InteractionRepository = Depends(get_interaction_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """Return lead from follow-up to the stage it was paused in"""
    return _transition(progression.resume, lead_id, repo, interaction_repo, config)


@router.post("/{lead_id}/close", response_model=LeadResponse)
def close_lead(
    lead_id: str,
    outcome: CloseOutcome,
    repo: LeadRepository = Depends(get_lead_repo),
    interaction_repo: InteractionRepository = Depends(get_interaction_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """Close lead as won or lost"""
    return _transition(progression.close, lead_id, repo, interaction_repo, config, outcome)


# ===========================================
# TEMPERATURE, SCHEDULING, COMPLIANCE
# ===========================================

@router.put("/{lead_id}/temperature", response_model=LeadResponse)
def pin_temperature(
    lead_id: str,
    payload: TemperatureOverride,
    repo: LeadRepository = Depends(get_lead_repo),
    interaction_repo: InteractionRepository = Depends(get_interaction_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """Set temperature manually; automatic derivation stops until cleared"""
    lead = set_manual(get_lead_or_404(lead_id, repo), payload.temperature)
    save_or_500(lead, repo)
    return respond(lead, config, interaction_repo)


@router.delete("/{lead_id}/temperature", response_model=LeadResponse)
def unpin_temperature(
    lead_id: str,
    repo: LeadRepository = Depends(get_lead_repo),
    interaction_repo: InteractionRepository = Depends(get_interaction_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """Go back to automatic temperature"""
    lead = get_lead_or_404(lead_id, repo)
    lead = clear_manual(lead, interaction_repo.get_interactions_for_lead(lead_id), config)
    save_or_500(lead, repo)
    return respond(lead, config, interaction_repo)


@router.put("/{lead_id}/next-contact", response_model=LeadResponse)
def schedule_next_contact(
    lead_id: str,
    payload: NextContactSchedule,
    repo: LeadRepository = Depends(get_lead_repo),
    interaction_repo: InteractionRepository = Depends(get_interaction_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """Schedule next action note and contact date together"""
    lead = get_lead_or_404(lead_id, repo)
    lead = lead.model_copy(update=payload.model_dump())
    save_or_500(lead, repo)
    return respond(lead, config, interaction_repo)


@router.delete("/{lead_id}/next-contact", response_model=LeadResponse)
def clear_next_contact(
    lead_id: str,
    repo: LeadRepository = Depends(get_lead_repo),
    interaction_repo: InteractionRepository = Depends(get_interaction_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """Clear next action note and contact date together"""
    lead = get_lead_or_404(lead_id, repo)
    lead = lead.model_copy(update={"next_action_note": None, "next_contact_date": None})
    save_or_500(lead, repo)
    return respond(lead, config, interaction_repo)


@router.put("/{lead_id}/sms-status", response_model=LeadResponse)
def change_sms_status(
    lead_id: str,
    payload: SmsStatusChange,
    repo: LeadRepository = Depends(get_lead_repo),
    interaction_repo: InteractionRepository = Depends(get_interaction_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """Toggle the SMS compliance gate and record the reason on the timeline"""
    lead = get_lead_or_404(lead_id, repo)
    lead = lead.model_copy(update={"sms_contact_status": payload.status})
    save_or_500(lead, repo)
    interaction_repo.add_interaction(InteractionCreate(message=payload.note).to_interaction(lead_id))
    logger.info("Lead %s SMS status -> %s", lead_id, payload.status.value)
    return respond(lead, config, interaction_repo)


@router.get("/{lead_id}/export")
def export_lead(
    lead_id: str,
    repo: LeadRepository = Depends(get_lead_repo),
    interaction_repo: InteractionRepository = Depends(get_interaction_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """Download lead as JSONL"""
    lead = get_lead_or_404(lead_id, repo)
    interactions = interaction_repo.get_interactions_for_lead(lead_id)
    lead = apply_if_automatic(lead, interactions, config)
    content = export_lead_jsonl(lead, interactions, config)
    return Response(
        content=content,
        media_type="application/jsonl",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(lead)}"'},
    )
