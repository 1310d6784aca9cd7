from pydantic import BaseModel


class SailDistribution(BaseModel):
    sail: str
    count: int
    percentage: float


class RiskMatrix(BaseModel):
    """Study counts per final GRC (rows) and final ARC (columns)."""
    total_assessed: int
    counts: dict[str, dict[str, int]]


class OsoCompliance(BaseModel):
    oso_id: str
    declared_count: int
    met_count: int
    compliance_rate: float
