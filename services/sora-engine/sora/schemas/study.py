from datetime import datetime

from pydantic import BaseModel, Field

from sora.schemas.assessment import RiskAssessment
from sora.schemas.snapshot import SoraSnapshot


class StudyWrite(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    snapshot: SoraSnapshot = SoraSnapshot()


class StudyRecord(BaseModel):
    id: str
    name: str
    owner: str
    data: dict
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StudySummary(BaseModel):
    id: str
    name: str
    owner: str
    sail: str | None = None
    updated_at: datetime | None = None


class StudyDossier(BaseModel):
    """Fully resolved study, as handed to the document generator."""
    study_id: str
    name: str
    owner: str
    generated_at: datetime
    table_version: str
    snapshot: SoraSnapshot
    assessment: RiskAssessment | None = None
    assessment_error: dict | None = None


class ReassessmentJobStatus(BaseModel):
    status: str  # IDLE / RUNNING / COMPLETED / FAILED
    progress: float  # 0.0 ~ 1.0
    total_studies: int
    processed_studies: int
    changed_studies: int
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error_message: str | None = None
