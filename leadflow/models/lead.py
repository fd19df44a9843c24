"""Lead models - Pydantic schemas for leads and interactions"""
import uuid
from datetime import datetime
from typing import Optional, List, Dict
from pydantic import BaseModel, Field, field_validator, model_validator
from enum import Enum

from leadflow.config import settings


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now().astimezone()


class Temperature(str, Enum):
    """Lead engagement temperature"""
    COLD = "cold"
    COLD_WARM = "cold-warm"
    WARM = "warm"
    WARM_HOT = "warm-hot"
    HOT = "hot"


class SmsContactStatus(str, Enum):
    """SMS compliance gate"""
    ACTIVO = "activo"
    BLOQUEADO = "bloqueado"


class Direction(str, Enum):
    """Interaction direction; no direction means a system/audit entry"""
    INCOMING = "incoming"
    OUTGOING = "outgoing"


class Urgency(str, Enum):
    """Follow-up urgency bucket"""
    OVERDUE = "overdue"
    TODAY = "today"
    UPCOMING = "upcoming"
    NO_ACTION = "no-action"


class Lead(BaseModel):
    """Lead as stored in database"""
    id: str = Field(default_factory=_new_id)
    name: str
    phone: str = ""
    city: Optional[str] = None
    business_type: Optional[str] = None
    pipeline_state: str
    previous_main_stage_id: Optional[str] = None
    temperature: Temperature = Temperature.COLD
    temperature_manual: bool = False
    next_contact_date: Optional[datetime] = None
    next_action_note: Optional[str] = None
    sms_contact_status: SmsContactStatus = SmsContactStatus.ACTIVO
    created_at: datetime = Field(default_factory=_now)


class Interaction(BaseModel):
    """Single timeline event of a lead"""
    id: str = Field(default_factory=_new_id)
    lead_id: str
    message: str
    created_at: datetime = Field(default_factory=_now)
    direction: Optional[Direction] = None


class InteractionCreate(BaseModel):
    """Fields for recording a new interaction"""
    message: str
    created_at: Optional[datetime] = None
    direction: Optional[Direction] = None

    def to_interaction(self, lead_id: str) -> Interaction:
        data = self.model_dump(exclude_none=True)
        return Interaction(lead_id=lead_id, **data)


class InteractionUpdate(BaseModel):
    """Editable interaction fields"""
    message: Optional[str] = None
    created_at: Optional[datetime] = None


class LeadCreate(BaseModel):
    """Fields for creating a new lead"""
    name: str
    phone: str = ""
    city: Optional[str] = None
    business_type: Optional[str] = None


class LeadUpdate(BaseModel):
    """Descriptive fields that can be updated directly"""
    name: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    business_type: Optional[str] = None

    @field_validator("name", "phone")
    @classmethod
    def not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("No puede ser nulo")
        return v


class NextContactSchedule(BaseModel):
    """Next action note and contact date, always set together"""
    next_action_note: str
    next_contact_date: datetime

    @field_validator("next_action_note")
    @classmethod
    def check_note(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("La próxima acción es requerida")
        if len(v) > settings.max_next_action_note_length:
            raise ValueError(f"Máximo {settings.max_next_action_note_length} caracteres")
        return v


class TemperatureOverride(BaseModel):
    """Manual temperature pin"""
    temperature: Temperature


class SmsStatusChange(BaseModel):
    """Compliance toggle with its audit note"""
    status: SmsContactStatus
    note: Optional[str] = None

    @model_validator(mode="after")
    def default_note(self):
        if not self.note or not self.note.strip():
            self.note = (
                DEFAULT_BLOCK_NOTE if self.status == SmsContactStatus.BLOQUEADO
                else DEFAULT_UNBLOCK_NOTE
            )
        return self


DEFAULT_BLOCK_NOTE = (
    "Se envió 1 SMS frío sin consentimiento.\n"
    "No hubo respuesta.\n"
    "Canal SMS bloqueado por compliance."
)
DEFAULT_UNBLOCK_NOTE = "Canal SMS reactivado."


class LeadResponse(Lead):
    """Lead response with derived fields"""
    stage_name: str
    stage_class: Optional[str] = None
    urgency: Urgency
    urgency_label: str = ""
    next_contact_label: str = ""
    progress: int = 0


class LeadListResponse(BaseModel):
    """Lead list"""
    total: int
    leads: List[LeadResponse]


class LeadSummary(BaseModel):
    """Dashboard counters"""
    total: int
    urgency: Dict[str, int]
    sms_blocked: int
    by_stage: Dict[str, int]
