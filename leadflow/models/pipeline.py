"""Pipeline models - stage descriptors and pipeline configuration"""
from typing import Optional, List
from enum import Enum
from pydantic import BaseModel, field_validator, model_validator


class StageClass(str, Enum):
    """Which of the three disjoint stage sets a stage belongs to"""
    MAIN = "main"
    AUXILIARY = "auxiliary"
    TERMINAL = "terminal"


class CloseOutcome(str, Enum):
    """Outcome carried by terminal stages"""
    WON = "won"
    LOST = "lost"


class TemperatureHint(str, Enum):
    """Temperature tier assigned to a stage"""
    HOT = "hot"
    WARM = "warm"
    WARM_IF_INCOMING = "warm_if_incoming"
    COLD = "cold"


class StageDescriptor(BaseModel):
    """Single pipeline stage"""
    id: str
    order: int
    name: str
    objective: str = ""
    recommended_action: str = ""
    advance_criterion: str = ""
    recommended_message: Optional[str] = None
    stage_class: StageClass = StageClass.MAIN
    outcome: Optional[CloseOutcome] = None
    temperature_hint: Optional[TemperatureHint] = None

    @model_validator(mode="after")
    def check_outcome(self):
        if self.stage_class == StageClass.TERMINAL and self.outcome is None:
            raise ValueError(f"Terminal stage '{self.id}' needs an outcome")
        if self.stage_class != StageClass.TERMINAL and self.outcome is not None:
            raise ValueError(f"Only terminal stages carry an outcome ('{self.id}')")
        return self


class StageUpdate(BaseModel):
    """Editable stage fields (id, order and class are fixed)"""
    name: Optional[str] = None
    objective: Optional[str] = None
    recommended_action: Optional[str] = None
    advance_criterion: Optional[str] = None
    recommended_message: Optional[str] = None
    temperature_hint: Optional[TemperatureHint] = None

    @field_validator("name", "objective", "recommended_action", "advance_criterion")
    @classmethod
    def not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class PipelineConfig(BaseModel):
    """
    Active pipeline configuration.

    Invariants: unique ids, at least one main stage, exactly one auxiliary
    stage, exactly one won and one lost terminal stage.
    """
    stages: List[StageDescriptor]

    @model_validator(mode="after")
    def check_stage_sets(self):
        ids = [s.id for s in self.stages]
        if len(ids) != len(set(ids)):
            raise ValueError("Stage ids must be unique")

        by_class = {c: [s for s in self.stages if s.stage_class == c] for c in StageClass}
        if not by_class[StageClass.MAIN]:
            raise ValueError("Pipeline needs at least one main stage")
        if len(by_class[StageClass.AUXILIARY]) != 1:
            raise ValueError("Pipeline needs exactly one auxiliary stage")

        outcomes = [s.outcome for s in by_class[StageClass.TERMINAL]]
        if sorted(o.value for o in outcomes) != ["lost", "won"]:
            raise ValueError("Pipeline needs exactly one won and one lost terminal stage")
        return self
