"""Study API endpoints: CRUD, dossier export, attached files, re-assessment."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from sora.database import get_sync_session
from sora.dependencies import get_principal, get_storage
from sora.models.study import SoraStudy
from sora.schemas.snapshot import FileReference
from sora.schemas.study import (
    ReassessmentJobStatus,
    StudyDossier,
    StudyRecord,
    StudySummary,
    StudyWrite,
)
from sora.services import study_store
from sora.services.file_storage import FileCategory, LocalFileStorage
from sora.services.reassessment import get_job_status, start_background_reassessment
from sora.services.risk_tables import TABLE_VERSION
from sora.services.study_store import Principal

logger = logging.getLogger(__name__)
router = APIRouter()


def _record(study: SoraStudy) -> StudyRecord:
    return StudyRecord(
        id=study.id,
        name=study.name,
        owner=study.user_id,
        data=study.data or {},
        created_at=study.created_at,
        updated_at=study.updated_at,
    )


def _load(session: Session, study_id: str, principal: Principal) -> SoraStudy:
    study = study_store.get_study(session, study_id, principal)
    if study is None:
        raise HTTPException(status_code=404, detail="Study not found")
    return study


@router.post("/studies/reassess")
async def trigger_reassessment(principal: Principal = Depends(get_principal)):
    """Recompute every stored assessment (runs in background, admin only)."""
    if not principal.is_admin:
        raise HTTPException(status_code=403, detail="Re-assessment requires the admin role")
    if not start_background_reassessment():
        raise HTTPException(status_code=409, detail="Re-assessment already running")
    return {"success": True, "message": "Re-assessment started"}


@router.get("/studies/reassess/status", response_model=ReassessmentJobStatus)
async def reassessment_status(principal: Principal = Depends(get_principal)):
    return ReassessmentJobStatus(**get_job_status())


@router.get("/studies", response_model=list[StudySummary])
def list_studies(
    principal: Principal = Depends(get_principal),
    session: Session = Depends(get_sync_session),
):
    """Studies owned by the caller, or all studies for admins."""
    summaries = []
    for study in study_store.list_studies(session, principal):
        assessment = (study.data or {}).get("assessment") or {}
        summaries.append(StudySummary(
            id=study.id,
            name=study.name,
            owner=study.user_id,
            sail=assessment.get("sail"),
            updated_at=study.updated_at,
        ))
    return summaries


@router.post("/studies", response_model=StudyRecord, status_code=201)
def create_study(
    body: StudyWrite,
    principal: Principal = Depends(get_principal),
    session: Session = Depends(get_sync_session),
):
    study = study_store.create_study(session, principal, body.name, body.snapshot)
    return _record(study)


@router.get("/studies/{study_id}", response_model=StudyRecord)
def get_study(
    study_id: str,
    principal: Principal = Depends(get_principal),
    session: Session = Depends(get_sync_session),
):
    return _record(_load(session, study_id, principal))


@router.put("/studies/{study_id}", response_model=StudyRecord)
def update_study(
    study_id: str,
    body: StudyWrite,
    principal: Principal = Depends(get_principal),
    session: Session = Depends(get_sync_session),
):
    """Replace name and snapshot; the assessment is recomputed."""
    study = study_store.update_study(session, study_id, principal, body.name, body.snapshot)
    if study is None:
        raise HTTPException(status_code=404, detail="Study not found")
    return _record(study)


@router.delete("/studies/{study_id}")
def delete_study(
    study_id: str,
    principal: Principal = Depends(get_principal),
    session: Session = Depends(get_sync_session),
    storage: LocalFileStorage = Depends(get_storage),
):
    """Delete a study together with its uploaded files."""
    if not study_store.delete_study(session, study_id, principal):
        raise HTTPException(status_code=404, detail="Study not found")
    removed = storage.delete_study_files(study_id)
    return {"success": True, "deleted_files": removed}


@router.get("/studies/{study_id}/export", response_model=StudyDossier)
def export_study(
    study_id: str,
    principal: Principal = Depends(get_principal),
    session: Session = Depends(get_sync_session),
):
    """Resolved dossier for document generation, recomputed with the current tables."""
    study = _load(session, study_id, principal)
    snapshot = study_store.study_snapshot(study)
    document = study_store.build_study_document(snapshot)

    return StudyDossier(
        study_id=study.id,
        name=study.name,
        owner=study.user_id,
        generated_at=datetime.now(timezone.utc),
        table_version=TABLE_VERSION,
        snapshot=snapshot,
        assessment=document["assessment"],
        assessment_error=document["assessment_error"],
    )


@router.post("/studies/{study_id}/files/{category}", response_model=FileReference, status_code=201)
def upload_file(
    study_id: str,
    category: FileCategory,
    file: UploadFile = File(...),
    principal: Principal = Depends(get_principal),
    session: Session = Depends(get_sync_session),
    storage: LocalFileStorage = Depends(get_storage),
):
    """Store a file for the study. The returned reference goes into the snapshot."""
    _load(session, study_id, principal)
    content = file.file.read()
    return storage.upload(
        study_id,
        category,
        file.filename or "upload",
        content,
        file.content_type or "",
    )


@router.delete("/studies/{study_id}/files")
def delete_file(
    study_id: str,
    url: str = Query(..., description="Public URL returned by the upload"),
    principal: Principal = Depends(get_principal),
    session: Session = Depends(get_sync_session),
    storage: LocalFileStorage = Depends(get_storage),
):
    _load(session, study_id, principal)
    if not storage.belongs_to(url, study_id):
        raise HTTPException(status_code=404, detail="File not found for this study")
    storage.delete(url)
    return {"success": True}
