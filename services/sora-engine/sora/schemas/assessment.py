from pydantic import BaseModel

from sora.schemas.snapshot import (
    AirspaceEnvironment,
    DroneParameters,
    FileReference,
    GroundMitigationSelection,
    OperationParameters,
    OsoEvidence,
    TacticalMitigationSelection,
)
from sora.services.risk_tables import (
    AirRiskClass,
    PopulationDensity,
    Robustness,
    Sail,
    StrategicMitigation,
)


class AppliedMitigation(BaseModel):
    mitigation_id: str
    robustness: Robustness | None = None
    credit_steps: int

    class Config:
        frozen = True


class ExcludedMitigation(BaseModel):
    mitigation_id: str
    reason: str

    class Config:
        frozen = True


class GroundRiskResult(BaseModel):
    intrinsic_grc: int
    ua_column: str
    population_density: PopulationDensity
    applied_mitigations: list[AppliedMitigation] = []
    excluded_mitigations: list[ExcludedMitigation] = []
    grc_floor: int
    final_grc: int
    rationale: list[str] = []

    class Config:
        frozen = True


class AirRiskResult(BaseModel):
    encounter_category: int
    initial_arc: AirRiskClass
    strategic_mitigations: list[AppliedMitigation] = []
    residual_arc: AirRiskClass
    tmpr_required: Robustness | None = None
    tactical_mitigations: list[AppliedMitigation] = []
    excluded_mitigations: list[ExcludedMitigation] = []
    final_arc: AirRiskClass
    rationale: list[str] = []

    class Config:
        frozen = True


class OsoEntry(BaseModel):
    oso_id: str
    title: str
    category: str
    required_robustness: Robustness
    optional: bool = False
    user_evidence: str = ""
    evidence_attachments: list[FileReference] = []
    user_declared_robustness: Robustness | None = None
    meets_requirement: bool | None = None

    class Config:
        frozen = True


class RiskAssessment(BaseModel):
    table_version: str
    ground: GroundRiskResult
    air: AirRiskResult
    sail: Sail
    oso: list[OsoEntry]

    class Config:
        frozen = True


# ----- request bodies for the per-step endpoints -----

class GroundRiskRequest(BaseModel):
    drone: DroneParameters
    operation: OperationParameters
    mitigations: list[GroundMitigationSelection] = []


class AirRiskRequest(BaseModel):
    operation: OperationParameters
    environment: AirspaceEnvironment
    strategic_mitigations: list[StrategicMitigation] = []
    tactical_mitigations: list[TacticalMitigationSelection] = []


class SailRequest(BaseModel):
    final_grc: int
    final_arc: AirRiskClass


class SailResponse(BaseModel):
    final_grc: int
    final_arc: AirRiskClass
    sail: Sail


class OsoMergeRequest(BaseModel):
    sail: Sail
    prior_evidence: list[OsoEvidence] = []


class StepCompleteness(BaseModel):
    step: str
    complete: bool
    missing_required: list[str]
    invalid_values: list[str]
