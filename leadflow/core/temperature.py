"""Temperature - Derive lead engagement from pipeline stage and history"""
from typing import Iterable

from leadflow.core.pipeline import stage_of
from leadflow.models import (
    Lead, Interaction, Direction, Temperature, TemperatureHint, PipelineConfig
)


TEMPERATURE_LABELS = {
    Temperature.COLD: "Cold",
    Temperature.COLD_WARM: "Cold-Warm",
    Temperature.WARM: "Warm",
    Temperature.WARM_HOT: "Warm-Hot",
    Temperature.HOT: "Hot",
}


def classify(
    config: PipelineConfig,
    pipeline_state: str,
    interactions: Iterable[Interaction]
) -> Temperature:
    """
    Automatic temperature for a stage.

    Driven by the stage's temperature_hint:
    - hot -> hot
    - warm -> warm
    - warm_if_incoming -> warm once the lead has written at least once, else cold
    - no hint, cold, or unknown stage -> cold
    """
    stage = stage_of(config, pipeline_state)
    hint = stage.temperature_hint if stage else None

    if hint == TemperatureHint.HOT:
        return Temperature.HOT
    if hint == TemperatureHint.WARM:
        return Temperature.WARM
    if hint == TemperatureHint.WARM_IF_INCOMING:
        has_incoming = any(i.direction == Direction.INCOMING for i in interactions)
        return Temperature.WARM if has_incoming else Temperature.COLD
    return Temperature.COLD


def apply_if_automatic(
    lead: Lead,
    interactions: Iterable[Interaction],
    config: PipelineConfig
) -> Lead:
    """Copy of the lead with a re-derived temperature, unless it is pinned"""
    if lead.temperature_manual:
        return lead
    temperature = classify(config, lead.pipeline_state, interactions)
    return lead.model_copy(update={"temperature": temperature})


def set_manual(lead: Lead, temperature: Temperature) -> Lead:
    """Pin the temperature so automatic derivation leaves it alone"""
    return lead.model_copy(update={"temperature": temperature, "temperature_manual": True})


def clear_manual(
    lead: Lead,
    interactions: Iterable[Interaction],
    config: PipelineConfig
) -> Lead:
    """Unpin and re-derive the automatic temperature"""
    unpinned = lead.model_copy(update={"temperature_manual": False})
    return apply_if_automatic(unpinned, interactions, config)


def temperature_label(temperature: Temperature) -> str:
    """Display label, e.g. Warm-Hot"""
    return TEMPERATURE_LABELS[temperature]
