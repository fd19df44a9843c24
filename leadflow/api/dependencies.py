"""API Dependencies - Shared dependency injection"""
from fastapi import Depends

from leadflow.integrations.supabase import (
    LeadRepository, InteractionRepository, PipelineConfigRepository,
    lead_repository, interaction_repository, pipeline_config_repository
)
from leadflow.models import PipelineConfig


def get_lead_repo() -> LeadRepository:
    """Dependency for lead repository"""
    return lead_repository


def get_interaction_repo() -> InteractionRepository:
    """Dependency for interaction repository"""
    return interaction_repository


def get_pipeline_repo() -> PipelineConfigRepository:
    """Dependency for pipeline configuration repository"""
    return pipeline_config_repository


def get_pipeline_config(
    repo: PipelineConfigRepository = Depends(get_pipeline_repo)
) -> PipelineConfig:
    """Active pipeline configuration, read fresh on every request"""
    return repo.get_pipeline_config()
