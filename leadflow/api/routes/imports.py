"""Imports API Routes - WhatsApp chat transcripts"""
from fastapi import APIRouter, Depends, HTTPException

from leadflow.api.dependencies import get_lead_repo, get_interaction_repo, get_pipeline_config
from leadflow.integrations.supabase import LeadRepository, InteractionRepository
from leadflow.core.importer import ChatParseError, preview_chat_import, import_chat
from leadflow.models import ChatImportRequest, ChatImportPreview, ChatImportResult, PipelineConfig

router = APIRouter(prefix="/imports", tags=["imports"])


@router.post("/whatsapp/preview", response_model=ChatImportPreview)
def preview_whatsapp_chat(
    request: ChatImportRequest,
    lead_repo: LeadRepository = Depends(get_lead_repo),
    interaction_repo: InteractionRepository = Depends(get_interaction_repo)
):
    """Parse pasted chat and report what an import would add"""
    try:
        return preview_chat_import(request, lead_repo, interaction_repo)
    except ChatParseError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/whatsapp", response_model=ChatImportResult)
def import_whatsapp_chat(
    request: ChatImportRequest,
    lead_repo: LeadRepository = Depends(get_lead_repo),
    interaction_repo: InteractionRepository = Depends(get_interaction_repo),
    config: PipelineConfig = Depends(get_pipeline_config)
):
    """
    Import pasted chat into a lead.

    Matches an existing lead by phone or creates one, then stores only the
    messages not already on its timeline.
    """
    try:
        return import_chat(request, lead_repo, interaction_repo, config)
    except ChatParseError as e:
        raise HTTPException(status_code=422, detail=str(e))
