"""Pytest fixtures: in-memory repositories and a pipeline config."""

from typing import Dict, List, Optional

import pytest

from leadflow.core.pipeline import default_pipeline_config, migrate_stage_id
from leadflow.models import Lead, Interaction, PipelineConfig, StageDescriptor, StageUpdate


class FakeInteractionRepository:
    """In-memory stand-in for InteractionRepository."""

    def __init__(self):
        self.rows: Dict[str, Interaction] = {}

    def get_interactions_for_lead(self, lead_id: str) -> List[Interaction]:
        return [i for i in self.rows.values() if i.lead_id == lead_id]

    def get_interaction_by_id(self, interaction_id: str) -> Optional[Interaction]:
        return self.rows.get(interaction_id)

    def add_interaction(self, interaction: Interaction) -> Interaction:
        self.rows[interaction.id] = interaction
        return interaction

    def update_interaction(self, interaction: Interaction) -> bool:
        if interaction.id not in self.rows:
            return False
        self.rows[interaction.id] = interaction
        return True

    def delete_interaction(self, interaction_id: str) -> bool:
        return self.rows.pop(interaction_id, None) is not None

    def delete_for_lead(self, lead_id: str) -> int:
        ids = [i.id for i in self.get_interactions_for_lead(lead_id)]
        for interaction_id in ids:
            del self.rows[interaction_id]
        return len(ids)


class FakeLeadRepository:
    """In-memory stand-in for LeadRepository (with the same stage migration)."""

    def __init__(self, interactions: FakeInteractionRepository):
        self.rows: Dict[str, Lead] = {}
        self.interactions = interactions

    def _read(self, lead: Lead) -> Lead:
        return lead.model_copy(update={"pipeline_state": migrate_stage_id(lead.pipeline_state)})

    def get_leads(self) -> List[Lead]:
        return [self._read(lead) for lead in self.rows.values()]

    def get_lead_by_id(self, lead_id: str) -> Optional[Lead]:
        lead = self.rows.get(lead_id)
        return self._read(lead) if lead else None

    def save_lead(self, lead: Lead) -> Lead:
        self.rows[lead.id] = lead
        return lead

    def update_lead(self, lead: Lead) -> bool:
        if lead.id not in self.rows:
            return False
        self.rows[lead.id] = lead
        return True

    def delete_lead(self, lead_id: str) -> bool:
        self.interactions.delete_for_lead(lead_id)
        return self.rows.pop(lead_id, None) is not None


class FakePipelineConfigRepository:
    """In-memory stand-in for PipelineConfigRepository."""

    def __init__(self):
        self.config = default_pipeline_config()

    def get_pipeline_config(self) -> PipelineConfig:
        return self.config

    def update_stage(self, stage_id: str, updates: StageUpdate):
        for i, stage in enumerate(self.config.stages):
            if stage.id == stage_id:
                updated = StageDescriptor.model_validate(
                    {**stage.model_dump(), **updates.model_dump(exclude_unset=True)}
                )
                self.config.stages[i] = updated
                return updated
        return None

    def reset_to_default(self) -> PipelineConfig:
        self.config = default_pipeline_config()
        return self.config


@pytest.fixture
def config() -> PipelineConfig:
    return default_pipeline_config()


@pytest.fixture
def interaction_repo() -> FakeInteractionRepository:
    return FakeInteractionRepository()


@pytest.fixture
def lead_repo(interaction_repo) -> FakeLeadRepository:
    return FakeLeadRepository(interaction_repo)


@pytest.fixture
def pipeline_repo() -> FakePipelineConfigRepository:
    return FakePipelineConfigRepository()
