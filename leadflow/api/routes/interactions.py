"""Interactions API Routes - lead timeline"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException

from leadflow.api.dependencies import get_lead_repo, get_interaction_repo, get_pipeline_config
from leadflow.api.routes.leads import get_lead_or_404, refresh_temperature
from leadflow.integrations.supabase import LeadRepository, InteractionRepository
from leadflow.core.timeline import sort_interactions
from leadflow.models import (
    Interaction, InteractionCreate, InteractionUpdate, Direction, SmsContactStatus, PipelineConfig
)

router = APIRouter(tags=["interactions"])


@router.get("/leads/{lead_id}/interactions", response_model=List[Interaction])
def list_interactions(
    lead_id: str,
    repo: InteractionRepository = Depends(get_interaction_repo)
):
    """Lead timeline, oldest first"""
    return sort_interactions(repo.get_interactions_for_lead(lead_id))


@router.post("/leads/{lead_id}/interactions", response_model=Interaction, status_code=201)
def add_interaction(
    lead_id: str,
    payload: InteractionCreate,
    lead_repo: LeadRepository = Depends(get_lead_repo),
    repo: InteractionRepository = Depends(get_interaction_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """Record a message on the timeline and re-derive temperature"""
    lead = get_lead_or_404(lead_id, lead_repo)
    if payload.direction == Direction.OUTGOING and lead.sms_contact_status == SmsContactStatus.BLOQUEADO:
        raise HTTPException(status_code=409, detail="Canal SMS bloqueado por compliance")

    interaction = repo.add_interaction(payload.to_interaction(lead_id))
    refresh_temperature(lead, config, lead_repo, repo)
    return interaction


@router.patch("/interactions/{interaction_id}", response_model=Interaction)
def update_interaction(
    interaction_id: str,
    updates: InteractionUpdate,
    repo: InteractionRepository = Depends(get_interaction_repo)
):
    """Edit message text or timestamp"""
    interaction = repo.get_interaction_by_id(interaction_id)
    if not interaction:
        raise HTTPException(status_code=404, detail="Interacción no encontrada")

    interaction = interaction.model_copy(update=updates.model_dump(exclude_none=True))
    if not repo.update_interaction(interaction):
        raise HTTPException(status_code=500, detail="Error al actualizar interacción")
    return interaction


@router.delete("/interactions/{interaction_id}")
def delete_interaction(
    interaction_id: str,
    lead_repo: LeadRepository = Depends(get_lead_repo),
    repo: InteractionRepository = Depends(get_interaction_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """Delete one interaction and re-derive the lead's temperature"""
    interaction = repo.get_interaction_by_id(interaction_id)
    if not interaction:
        raise HTTPException(status_code=404, detail="Interacción no encontrada")

    repo.delete_interaction(interaction_id)
    lead = lead_repo.get_lead_by_id(interaction.lead_id)
    if lead:
        refresh_temperature(lead, config, lead_repo, repo)
    return {"status": "deleted"}
