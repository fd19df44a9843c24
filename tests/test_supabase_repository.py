"""
Tests for the Supabase repositories against a mocked client.
"""

from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from leadflow.core.pipeline import default_pipeline_config
from leadflow.integrations.supabase import (
    LeadRepository, InteractionRepository, PipelineConfigRepository
)
from leadflow.models import Interaction, Direction, StageUpdate


def _client(*results):
    """Client whose query builder chains to itself; execute() yields `results` in order"""
    query = MagicMock()
    for name in ["select", "eq", "neq", "order", "limit", "insert", "update", "delete", "upsert"]:
        getattr(query, name).return_value = query
    query.execute.side_effect = [
        r if isinstance(r, Exception) else MagicMock(data=r) for r in results
    ]
    client = MagicMock()
    client.table.return_value = query
    return client, query


def _lead_row(**kwargs):
    row = {
        "id": "lead-1",
        "name": "Ana",
        "phone": "+1 (714) 438-9132",
        "pipeline_state": "nuevo",
        "created_at": "2026-01-18T14:55:00-08:00",
    }
    row.update(kwargs)
    return row


class TestLeadRepository:
    """Reads, migration and cascade delete."""

    def test_legacy_stage_ids_migrated_on_read(self):
        client, _ = _client([
            _lead_row(pipeline_state="videoEnviado"),
            _lead_row(id="lead-2", pipeline_state="followUp", previous_main_stage_id="demoOfrecida"),
        ])
        leads = LeadRepository(client).get_leads()

        assert leads[0].pipeline_state == "video_enviado"
        assert leads[1].pipeline_state == "follow_up"
        assert leads[1].previous_main_stage_id == "demo_ofrecida"

    def test_get_leads_newest_first(self):
        client, query = _client([])
        LeadRepository(client).get_leads()
        query.order.assert_called_once_with("created_at", desc=True)

    def test_get_lead_by_id_missing(self):
        client, _ = _client([])
        assert LeadRepository(client).get_lead_by_id("nope") is None

    def test_delete_cascades_to_interactions(self):
        client, query = _client([{"id": "i-1"}, {"id": "i-2"}], [_lead_row()])
        repo = LeadRepository(client)

        assert repo.delete_lead("lead-1") is True
        query.eq.assert_any_call("lead_id", "lead-1")
        query.eq.assert_any_call("id", "lead-1")
        assert query.delete.call_count == 2

    def test_update_reports_missing_row(self):
        client, _ = _client([])
        lead = LeadRepository._to_lead(_lead_row())
        assert LeadRepository(client).update_lead(lead) is False


class TestInteractionRepository:

    def test_add_serializes_json(self):
        client, query = _client([{}])
        repo = InteractionRepository(client)

        item = Interaction(lead_id="lead-1", message="Hola", direction=Direction.INCOMING)
        repo.add_interaction(item)

        payload = query.insert.call_args[0][0]
        assert payload["direction"] == "incoming"
        assert isinstance(payload["created_at"], str)

    def test_delete_for_lead_counts(self):
        client, _ = _client([{"id": "a"}, {"id": "b"}, {"id": "c"}])
        assert InteractionRepository(client).delete_for_lead("lead-1") == 3


class TestPipelineConfigRepository:
    """Seeding and fallbacks."""

    def test_empty_table_is_seeded(self):
        client, query = _client([], [])
        config = PipelineConfigRepository(client).get_pipeline_config()

        assert config == default_pipeline_config()
        rows = query.upsert.call_args[0][0]
        assert [r["id"] for r in rows][:2] == ["nuevo", "respondio"]

    def test_stored_config_is_loaded(self):
        stored = [s.model_dump(mode="json") for s in default_pipeline_config().stages]
        stored[0]["name"] = "Prospecto"
        client, _ = _client(stored)

        config = PipelineConfigRepository(client).get_pipeline_config()
        assert config.stages[0].name == "Prospecto"

    def test_storage_error_falls_back_to_default(self):
        client, _ = _client(RuntimeError("connection refused"))
        assert PipelineConfigRepository(client).get_pipeline_config() == default_pipeline_config()

    def test_invalid_stored_config_falls_back_to_default(self):
        stored = [s.model_dump(mode="json") for s in default_pipeline_config().stages]
        stored = [r for r in stored if r["stage_class"] != "auxiliary"]
        client, _ = _client(stored)
        assert PipelineConfigRepository(client).get_pipeline_config() == default_pipeline_config()

    def test_update_stage(self):
        stored = [s.model_dump(mode="json") for s in default_pipeline_config().stages]
        client, query = _client(stored, [{}])

        updated = PipelineConfigRepository(client).update_stage(
            "respondio", StageUpdate(name="Contestó")
        )
        assert updated.name == "Contestó"
        assert updated.objective == default_pipeline_config().stages[1].objective
        assert query.upsert.call_args[0][0]["name"] == "Contestó"

    def test_update_unknown_stage(self):
        stored = [s.model_dump(mode="json") for s in default_pipeline_config().stages]
        client, _ = _client(stored)
        assert PipelineConfigRepository(client).update_stage("nope", StageUpdate(name="x")) is None

    def test_update_stage_rejects_null_text(self):
        stored = [s.model_dump(mode="json") for s in default_pipeline_config().stages]
        client, query = _client(stored)

        with pytest.raises(ValidationError):
            StageUpdate(name=None)
        with pytest.raises(ValidationError):
            PipelineConfigRepository(client).update_stage(
                "respondio", StageUpdate.model_construct(name=None)
            )
        query.upsert.assert_not_called()
