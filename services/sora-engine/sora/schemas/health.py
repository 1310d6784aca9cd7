from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    db_type: str
    table_version: str
    reassessment_enabled: bool
