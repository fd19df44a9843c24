"""Stage progression - Allowed pipeline transitions"""
import logging
from typing import NamedTuple

from leadflow.core.pipeline import (
    stage_of, class_of, is_auxiliary, is_terminal, next_of, first_stage,
    auxiliary_stage, terminal_stage, stage_name
)
from leadflow.models import (
    Lead, InteractionCreate, StageClass, CloseOutcome, PipelineConfig
)

logger = logging.getLogger(__name__)


class TransitionError(ValueError):
    """Requested stage change is not allowed from the lead's current stage"""


class StageTransition(NamedTuple):
    lead: Lead
    audit: InteractionCreate


def _move(lead: Lead, config: PipelineConfig, stage_id: str, **updates) -> StageTransition:
    moved = lead.model_copy(update={"pipeline_state": stage_id, **updates})
    audit = InteractionCreate(message=f"Movido a: {stage_name(config, stage_id)}")
    logger.info("Lead %s: %s -> %s", lead.id, lead.pipeline_state, stage_id)
    return StageTransition(moved, audit)


def advance(lead: Lead, config: PipelineConfig) -> StageTransition:
    """Move to the next main stage"""
    nxt = next_of(config, lead.pipeline_state)
    if nxt is None:
        raise TransitionError(
            f"'{stage_name(config, lead.pipeline_state)}' no tiene una etapa siguiente"
        )
    return _move(lead, config, nxt.id)


def pause(lead: Lead, config: PipelineConfig) -> StageTransition:
    """Park a lead in the auxiliary stage, remembering where it came from"""
    if class_of(config, lead.pipeline_state) != StageClass.MAIN:
        raise TransitionError("Solo se puede pausar un lead en una etapa principal")
    aux = auxiliary_stage(config)
    return _move(lead, config, aux.id, previous_main_stage_id=lead.pipeline_state)


def resume(lead: Lead, config: PipelineConfig) -> StageTransition:
    """
    Return from the auxiliary stage to the recorded main stage.

    Falls back to the first main stage when the recorded stage is missing or
    is no longer part of the main sequence.
    """
    if not is_auxiliary(config, lead.pipeline_state):
        raise TransitionError("El lead no está en seguimiento")

    origin = stage_of(config, lead.previous_main_stage_id) if lead.previous_main_stage_id else None
    if origin is None or origin.stage_class != StageClass.MAIN:
        origin = first_stage(config)
    return _move(lead, config, origin.id, previous_main_stage_id=None)


def close(lead: Lead, config: PipelineConfig, outcome: CloseOutcome) -> StageTransition:
    """Move a lead into the won or lost terminal stage (also rescues dangling stages)"""
    if is_terminal(config, lead.pipeline_state):
        raise TransitionError("El lead ya está en un estado final del pipeline")
    target = terminal_stage(config, outcome)
    return _move(lead, config, target.id, previous_main_stage_id=None)
