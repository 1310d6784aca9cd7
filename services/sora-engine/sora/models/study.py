"""SQLAlchemy model for sora_studies table (READ-WRITE)."""

from sqlalchemy import JSON, Column, DateTime, String, func
from sqlalchemy.dialects.postgresql import JSONB

from sora.database import Base


class SoraStudy(Base):
    """One wizard study: snapshot + derived results as a single JSON document."""

    __tablename__ = "sora_studies"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    data = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)  # {"snapshot", "assessment", "assessment_error"}
    user_id = Column(String(128), index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())
