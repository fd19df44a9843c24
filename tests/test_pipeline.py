"""
Tests for the pipeline definition and stage navigation.
"""

import pytest
from pydantic import ValidationError

from leadflow.core.pipeline import (
    default_pipeline_config, main_sequence, first_stage, auxiliary_stage,
    terminal_stage, stage_of, class_of, next_of, previous_of, is_terminal,
    is_auxiliary, stage_name, progress_percent, migrate_stage_id
)
from leadflow.models import (
    StageClass, CloseOutcome, StageDescriptor, PipelineConfig
)


MAIN_IDS = [
    "nuevo", "respondio", "video_enviado", "demo_ofrecida",
    "demo_agendada", "demo_realizada", "oferta_enviada",
]


class TestDefaultPipeline:
    """Shape of the built-in configuration."""

    def test_main_sequence_order(self, config):
        assert [s.id for s in main_sequence(config)] == MAIN_IDS

    def test_first_stage(self, config):
        assert first_stage(config).id == "nuevo"

    def test_auxiliary_and_terminal_sets(self, config):
        assert auxiliary_stage(config).id == "follow_up"
        assert terminal_stage(config, CloseOutcome.WON).id == "cierre_ganado"
        assert terminal_stage(config, CloseOutcome.LOST).id == "cierre_perdido"

    def test_fresh_copy_each_time(self):
        a = default_pipeline_config()
        b = default_pipeline_config()
        a.stages[0] = a.stages[0].model_copy(update={"name": "Changed"})
        assert b.stages[0].name == "Nuevo"


class TestNavigator:
    """Lookups over the stage table."""

    def test_stage_of_known_and_unknown(self, config):
        assert stage_of(config, "respondio").name == "Respondió"
        assert stage_of(config, "does_not_exist") is None

    def test_class_of(self, config):
        assert class_of(config, "nuevo") == StageClass.MAIN
        assert class_of(config, "follow_up") == StageClass.AUXILIARY
        assert class_of(config, "cierre_ganado") == StageClass.TERMINAL
        assert class_of(config, "nope") is None

    def test_every_main_stage_but_last_has_non_terminal_successor(self, config):
        for stage_id in MAIN_IDS[:-1]:
            nxt = next_of(config, stage_id)
            assert nxt is not None
            assert class_of(config, nxt.id) == StageClass.MAIN

    def test_next_of_is_none_outside_linear_flow(self, config):
        assert next_of(config, "oferta_enviada") is None
        assert next_of(config, "follow_up") is None
        assert next_of(config, "cierre_ganado") is None
        assert next_of(config, "cierre_perdido") is None
        assert next_of(config, "unknown") is None

    def test_previous_of(self, config):
        assert previous_of(config, "nuevo") is None
        assert previous_of(config, "respondio").id == "nuevo"
        assert previous_of(config, "oferta_enviada").id == "demo_realizada"
        assert previous_of(config, "follow_up") is None
        assert previous_of(config, "cierre_perdido") is None

    def test_predicates(self, config):
        assert is_terminal(config, "cierre_perdido")
        assert not is_terminal(config, "nuevo")
        assert is_auxiliary(config, "follow_up")
        assert not is_auxiliary(config, "unknown")

    def test_stage_name_falls_back_to_raw_id(self, config):
        assert stage_name(config, "demo_agendada") == "Demo Agendada"
        assert stage_name(config, "stage_from_old_app") == "stage_from_old_app"

    def test_progress(self, config):
        assert progress_percent(config, "nuevo") == 14
        assert progress_percent(config, "oferta_enviada") == 100
        assert progress_percent(config, "cierre_ganado") == 100
        assert progress_percent(config, "cierre_perdido") == 0
        assert progress_percent(config, "follow_up") == 0

    def test_order_field_drives_sequence(self):
        stages = [
            StageDescriptor(id="b", order=2, name="B"),
            StageDescriptor(id="a", order=1, name="A"),
            StageDescriptor(id="pause", order=9, name="P", stage_class=StageClass.AUXILIARY),
            StageDescriptor(id="won", order=10, name="W", stage_class=StageClass.TERMINAL,
                            outcome=CloseOutcome.WON),
            StageDescriptor(id="lost", order=11, name="L", stage_class=StageClass.TERMINAL,
                            outcome=CloseOutcome.LOST),
        ]
        custom = PipelineConfig(stages=stages)

        assert first_stage(custom).id == "a"
        assert next_of(custom, "a").id == "b"
        assert next_of(custom, "b") is None


class TestPipelineConfigValidation:
    """Invariants enforced on configuration."""

    def _terminals(self):
        return [
            StageDescriptor(id="won", order=8, name="W", stage_class=StageClass.TERMINAL,
                            outcome=CloseOutcome.WON),
            StageDescriptor(id="lost", order=9, name="L", stage_class=StageClass.TERMINAL,
                            outcome=CloseOutcome.LOST),
        ]

    def test_requires_auxiliary_stage(self):
        with pytest.raises(ValidationError):
            PipelineConfig(stages=[StageDescriptor(id="a", order=1, name="A")] + self._terminals())

    def test_rejects_duplicate_ids(self):
        stages = [
            StageDescriptor(id="a", order=1, name="A"),
            StageDescriptor(id="a", order=2, name="A again"),
            StageDescriptor(id="p", order=3, name="P", stage_class=StageClass.AUXILIARY),
        ] + self._terminals()
        with pytest.raises(ValidationError):
            PipelineConfig(stages=stages)

    def test_terminal_stage_needs_outcome(self):
        with pytest.raises(ValidationError):
            StageDescriptor(id="won", order=1, name="W", stage_class=StageClass.TERMINAL)

    def test_main_stage_cannot_have_outcome(self):
        with pytest.raises(ValidationError):
            StageDescriptor(id="a", order=1, name="A", outcome=CloseOutcome.WON)


class TestStageMigration:
    """Historical ids map onto canonical ones."""

    @pytest.mark.parametrize("legacy,canonical", [
        ("videoEnviado", "video_enviado"),
        ("demoAgendada", "demo_agendada"),
        ("ofertaEnviada", "oferta_enviada"),
        ("cierreGanado", "cierre_ganado"),
        ("contacto_inicial", "nuevo"),
        ("valor_entregado", "video_enviado"),
        ("win", "cierre_ganado"),
        ("lost", "cierre_perdido"),
    ])
    def test_legacy_ids(self, legacy, canonical):
        assert migrate_stage_id(legacy) == canonical

    def test_canonical_and_unknown_pass_through(self):
        assert migrate_stage_id("respondio") == "respondio"
        assert migrate_stage_id("custom_stage") == "custom_stage"
        assert migrate_stage_id(None) is None
