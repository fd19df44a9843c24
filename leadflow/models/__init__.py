"""Pydantic Models"""
from .lead import (
    Temperature, SmsContactStatus, Direction, Urgency,
    Lead, LeadCreate, LeadUpdate, LeadResponse, LeadListResponse, LeadSummary,
    Interaction, InteractionCreate, InteractionUpdate,
    NextContactSchedule, TemperatureOverride, SmsStatusChange,
)
from .pipeline import (
    StageClass, CloseOutcome, TemperatureHint,
    StageDescriptor, StageUpdate, PipelineConfig
)
from .chat import (
    ParsedMessage, DateRange, ParsedChat, ReconcileResult,
    ChatImportRequest, ChatImportPreview, ChatImportResult
)

__all__ = [
    "Temperature", "SmsContactStatus", "Direction", "Urgency",
    "Lead", "LeadCreate", "LeadUpdate", "LeadResponse", "LeadListResponse", "LeadSummary",
    "Interaction", "InteractionCreate", "InteractionUpdate",
    "NextContactSchedule", "TemperatureOverride", "SmsStatusChange",
    "StageClass", "CloseOutcome", "TemperatureHint",
    "StageDescriptor", "StageUpdate", "PipelineConfig",
    "ParsedMessage", "DateRange", "ParsedChat", "ReconcileResult",
    "ChatImportRequest", "ChatImportPreview", "ChatImportResult",
]
