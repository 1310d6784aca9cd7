"""Study persistence, scoped to the owning user.

A study is stored as one record keyed by id whose ``data`` column holds the
wizard snapshot and the derived assessment as a single JSON document.
Principals with the admin role bypass the owner scope.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from sora.exceptions import ValidationError
from sora.models.study import SoraStudy
from sora.schemas.snapshot import SoraSnapshot
from sora.services.assessment import assess

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    user_id: str
    is_admin: bool = False


def build_study_document(snapshot: SoraSnapshot) -> dict:
    """Snapshot plus derived results, ready for the ``data`` column.

    An incomplete snapshot is still stored; the record then carries the
    validation error instead of an assessment. ConfigurationError propagates.
    """
    document = {
        "snapshot": snapshot.model_dump(mode="json"),
        "assessment": None,
        "assessment_error": None,
    }
    try:
        document["assessment"] = assess(snapshot).model_dump(mode="json")
    except ValidationError as e:
        document["assessment_error"] = {"code": e.code, "field": e.field, "message": e.message}
    return document


def _scoped(stmt, principal: Principal):
    if principal.is_admin:
        return stmt
    return stmt.where(SoraStudy.user_id == principal.user_id)


def list_studies(session: Session, principal: Principal) -> list[SoraStudy]:
    stmt = _scoped(select(SoraStudy), principal).order_by(SoraStudy.updated_at.desc())
    return list(session.scalars(stmt))


def get_study(session: Session, study_id: str, principal: Principal) -> SoraStudy | None:
    stmt = _scoped(select(SoraStudy).where(SoraStudy.id == study_id), principal)
    return session.scalars(stmt).one_or_none()


def create_study(session: Session, principal: Principal, name: str, snapshot: SoraSnapshot) -> SoraStudy:
    now = datetime.now(timezone.utc)
    study = SoraStudy(
        id=str(uuid.uuid4()),
        name=name,
        data=build_study_document(snapshot),
        user_id=principal.user_id,
        created_at=now,
        updated_at=now,
    )
    session.add(study)
    session.commit()
    session.refresh(study)
    logger.info("Created study %s for %s", study.id, principal.user_id)
    return study


def update_study(
    session: Session,
    study_id: str,
    principal: Principal,
    name: str,
    snapshot: SoraSnapshot,
) -> SoraStudy | None:
    study = get_study(session, study_id, principal)
    if study is None:
        return None
    study.name = name
    study.data = build_study_document(snapshot)
    study.updated_at = datetime.now(timezone.utc)
    session.commit()
    session.refresh(study)
    logger.info("Updated study %s", study.id)
    return study


def delete_study(session: Session, study_id: str, principal: Principal) -> bool:
    study = get_study(session, study_id, principal)
    if study is None:
        return False
    session.delete(study)
    session.commit()
    logger.info("Deleted study %s", study_id)
    return True


def study_snapshot(study: SoraStudy) -> SoraSnapshot:
    return SoraSnapshot.model_validate((study.data or {}).get("snapshot") or {})
