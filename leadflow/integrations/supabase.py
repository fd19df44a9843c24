"""Supabase integration - Lead, interaction and pipeline storage"""
import logging
from typing import Optional, List
from functools import lru_cache
from pydantic import ValidationError
from supabase import create_client, Client

from leadflow.config import settings
from leadflow.core.pipeline import default_pipeline_config, migrate_stage_id
from leadflow.models import (
    Lead, Interaction, StageDescriptor, StageUpdate, PipelineConfig
)

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client:
    """Get cached Supabase client"""
    return create_client(settings.supabase_url, settings.supabase_key)


class _Repository:
    """Shared client handling; the client is created on first use"""

    table: str

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    def _query(self):
        return self.client.table(self.table)


class InteractionRepository(_Repository):
    """Interaction data access layer"""

    def __init__(self, client: Optional[Client] = None):
        super().__init__(client)
        self.table = settings.table_interactions

    def get_interactions_for_lead(self, lead_id: str) -> List[Interaction]:
        result = self._query().select("*").eq("lead_id", lead_id).execute()
        return [Interaction.model_validate(row) for row in result.data or []]

    def get_interaction_by_id(self, interaction_id: str) -> Optional[Interaction]:
        result = self._query().select("*").eq("id", interaction_id).limit(1).execute()
        return Interaction.model_validate(result.data[0]) if result.data else None

    def add_interaction(self, interaction: Interaction) -> Interaction:
        self._query().insert(interaction.model_dump(mode="json")).execute()
        return interaction

    def update_interaction(self, interaction: Interaction) -> bool:
        data = interaction.model_dump(mode="json", exclude={"id", "lead_id"})
        result = self._query().update(data).eq("id", interaction.id).execute()
        return len(result.data) > 0

    def delete_interaction(self, interaction_id: str) -> bool:
        result = self._query().delete().eq("id", interaction_id).execute()
        return len(result.data) > 0

    def delete_for_lead(self, lead_id: str) -> int:
        result = self._query().delete().eq("lead_id", lead_id).execute()
        return len(result.data) if result.data else 0


class LeadRepository(_Repository):
    """
    Lead data access layer.

    Historical stage ids are migrated to canonical ones when rows are read,
    so the rest of the code only ever sees current ids.
    """

    def __init__(
        self,
        client: Optional[Client] = None,
        interactions: Optional[InteractionRepository] = None
    ):
        super().__init__(client)
        self.table = settings.table_leads
        self.interactions = interactions or InteractionRepository(client)

    @staticmethod
    def _to_lead(row: dict) -> Lead:
        row = dict(row)
        row["pipeline_state"] = migrate_stage_id(row.get("pipeline_state"))
        row["previous_main_stage_id"] = migrate_stage_id(row.get("previous_main_stage_id"))
        return Lead.model_validate(row)

    def get_leads(self) -> List[Lead]:
        result = self._query().select("*").order("created_at", desc=True).execute()
        return [self._to_lead(row) for row in result.data or []]

    def get_lead_by_id(self, lead_id: str) -> Optional[Lead]:
        result = self._query().select("*").eq("id", lead_id).limit(1).execute()
        return self._to_lead(result.data[0]) if result.data else None

    def save_lead(self, lead: Lead) -> Lead:
        self._query().insert(lead.model_dump(mode="json")).execute()
        return lead

    def update_lead(self, lead: Lead) -> bool:
        data = lead.model_dump(mode="json", exclude={"id", "created_at"})
        result = self._query().update(data).eq("id", lead.id).execute()
        return len(result.data) > 0

    def delete_lead(self, lead_id: str) -> bool:
        """Delete a lead together with all its interactions"""
        removed = self.interactions.delete_for_lead(lead_id)
        result = self._query().delete().eq("id", lead_id).execute()
        logger.info("Deleted lead %s (%d interactions)", lead_id, removed)
        return len(result.data) > 0


class PipelineConfigRepository(_Repository):
    """Pipeline stage configuration, seeded with the default pipeline"""

    def __init__(self, client: Optional[Client] = None):
        super().__init__(client)
        self.table = settings.table_pipeline_stages

    def _save_all(self, config: PipelineConfig) -> None:
        rows = [s.model_dump(mode="json") for s in config.stages]
        self._query().upsert(rows, on_conflict="id").execute()

    def get_pipeline_config(self) -> PipelineConfig:
        """Active configuration; the default one when nothing usable is stored"""
        try:
            result = self._query().select("*").order("order").execute()
        except Exception as e:
            logger.warning("Could not load pipeline config, using default: %s", e)
            return default_pipeline_config()

        if not result.data:
            config = default_pipeline_config()
            try:
                self._save_all(config)
            except Exception as e:
                logger.warning("Could not seed default pipeline config: %s", e)
            return config

        try:
            return PipelineConfig(stages=[StageDescriptor.model_validate(r) for r in result.data])
        except ValidationError as e:
            logger.error("Stored pipeline config is invalid, using default: %s", e)
            return default_pipeline_config()

    def update_stage(self, stage_id: str, updates: StageUpdate) -> Optional[StageDescriptor]:
        """Update editable fields of one stage; None when the stage doesn't exist"""
        config = self.get_pipeline_config()
        stage = next((s for s in config.stages if s.id == stage_id), None)
        if stage is None:
            return None

        updated = StageDescriptor.model_validate(
            {**stage.model_dump(), **updates.model_dump(exclude_unset=True)}
        )
        self._query().upsert(updated.model_dump(mode="json"), on_conflict="id").execute()
        return updated

    def reset_to_default(self) -> PipelineConfig:
        self._query().delete().neq("id", "").execute()
        config = default_pipeline_config()
        self._save_all(config)
        return config


# Singleton instances (the client itself is created lazily)
interaction_repository = InteractionRepository()
lead_repository = LeadRepository(interactions=interaction_repository)
pipeline_config_repository = PipelineConfigRepository()
