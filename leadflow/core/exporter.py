"""Lead exporter - one lead as line-delimited JSON"""
import json
from typing import Iterable

from leadflow.core.pipeline import (
    main_sequence, next_of, previous_of, progress_percent, stage_name, terminal_stage
)
from leadflow.core.temperature import temperature_label
from leadflow.core.timeline import sort_interactions
from leadflow.models import Lead, Interaction, Direction, CloseOutcome, PipelineConfig


def export_lead_jsonl(
    lead: Lead,
    interactions: Iterable[Interaction],
    config: PipelineConfig
) -> str:
    """
    Export a lead as four JSON lines:
    lead_info, pipeline_status, pipeline_visual and timeline.
    """
    previous = previous_of(config, lead.pipeline_state)
    nxt = next_of(config, lead.pipeline_state)

    lead_info = {
        "type": "lead_info",
        "name": lead.name,
        "phone": lead.phone,
        "city": lead.city or "",
        "industry": lead.business_type or "",
        "temperature": temperature_label(lead.temperature),
    }

    pipeline_status = {
        "type": "pipeline_status",
        "previous_stage": previous.name if previous else "",
        "current_stage": stage_name(config, lead.pipeline_state),
        "next_stage": nxt.name if nxt else "",
        "progress": f"{progress_percent(config, lead.pipeline_state)}%",
    }

    pipeline_visual = {
        "type": "pipeline_visual",
        "stages": [s.name for s in main_sequence(config)] + [terminal_stage(config, CloseOutcome.WON).name],
    }

    timeline = {
        "type": "timeline",
        "events": [
            {
                "timestamp": i.created_at.astimezone().strftime("%Y-%m-%d %H:%M"),
                "actor": "Lead" if i.direction == Direction.INCOMING else "Yo",
                "text": i.message,
            }
            for i in sort_interactions(interactions)
        ],
    }

    lines = [lead_info, pipeline_status, pipeline_visual, timeline]
    return "\n".join(json.dumps(line, ensure_ascii=False) for line in lines)


def export_filename(lead: Lead) -> str:
    """Download name, e.g. lead_juan_perez_export.jsonl"""
    return f"lead_{'_'.join(lead.name.split()).lower()}_export.jsonl"
