"""Pipeline API Routes - stage configuration and navigation"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from leadflow.api.dependencies import get_pipeline_repo, get_pipeline_config
from leadflow.integrations.supabase import PipelineConfigRepository
from leadflow.core.pipeline import stage_of, next_of, previous_of, class_of, progress_percent
from leadflow.models import PipelineConfig, StageDescriptor, StageUpdate

router = APIRouter(prefix="/pipeline", tags=["pipeline"])


@router.get("/stages", response_model=PipelineConfig)
def list_stages(config: PipelineConfig = Depends(get_pipeline_config)):
    """Active stage configuration"""
    return config


@router.get("/stages/{stage_id}")
def get_stage(stage_id: str, config: PipelineConfig = Depends(get_pipeline_config)):
    """Stage with its neighbours in the main sequence"""
    stage = stage_of(config, stage_id)
    if not stage:
        raise HTTPException(status_code=404, detail="Etapa no encontrada")

    return {
        "stage": stage,
        "stage_class": class_of(config, stage_id),
        "next": next_of(config, stage_id),
        "previous": previous_of(config, stage_id),
        "progress": progress_percent(config, stage_id),
    }


@router.patch("/stages/{stage_id}", response_model=StageDescriptor)
def update_stage(
    stage_id: str,
    updates: StageUpdate,
    repo: PipelineConfigRepository = Depends(get_pipeline_repo)
):
    """Edit texts or temperature hint of a stage"""
    try:
        stage = repo.update_stage(stage_id, updates)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if not stage:
        raise HTTPException(status_code=404, detail="Etapa no encontrada")
    return stage


@router.post("/reset", response_model=PipelineConfig)
def reset_pipeline(repo: PipelineConfigRepository = Depends(get_pipeline_repo)):
    """Restore the default pipeline"""
    return repo.reset_to_default()
