"""Re-assessment of stored studies against the current lookup tables.

Runs in a background thread (API trigger) or from the scheduler. Progress is
kept in a module-level status dict guarded by a lock.
"""

import logging
import threading
from datetime import datetime, timezone

from sqlalchemy import select

from sora.database import SyncSessionLocal
from sora.models.study import SoraStudy
from sora.services.study_store import build_study_document, study_snapshot

logger = logging.getLogger(__name__)

_job_lock = threading.Lock()
_job_status = {
    "status": "IDLE",
    "progress": 0.0,
    "total_studies": 0,
    "processed_studies": 0,
    "changed_studies": 0,
    "started_at": None,
    "completed_at": None,
    "error_message": None,
}


def get_job_status() -> dict:
    with _job_lock:
        return dict(_job_status)


def try_start_job() -> bool:
    """Mark the job RUNNING. Returns False if it already runs."""
    with _job_lock:
        if _job_status["status"] == "RUNNING":
            return False
        _job_status.update({
            "status": "RUNNING",
            "progress": 0.0,
            "total_studies": 0,
            "processed_studies": 0,
            "changed_studies": 0,
            "started_at": datetime.now(timezone.utc).isoformat(),
            "completed_at": None,
            "error_message": None,
        })
        return True


def run_reassessment():
    """Recompute and store the assessment of every study.

    Expects ``try_start_job()`` to have succeeded.
    """
    try:
        with SyncSessionLocal() as session:
            studies = list(session.scalars(select(SoraStudy)))
            total = len(studies)
            with _job_lock:
                _job_status["total_studies"] = total

            changed = 0
            for i, study in enumerate(studies, start=1):
                document = build_study_document(study_snapshot(study))
                if document != study.data:
                    study.data = document
                    study.updated_at = datetime.now(timezone.utc)
                    changed += 1
                with _job_lock:
                    _job_status["processed_studies"] = i
                    _job_status["changed_studies"] = changed
                    _job_status["progress"] = i / total

            session.commit()

        with _job_lock:
            _job_status["status"] = "COMPLETED"
            _job_status["progress"] = 1.0
            _job_status["completed_at"] = datetime.now(timezone.utc).isoformat()

        logger.info("Re-assessment complete: %d studies, %d changed", total, changed)

    except Exception as e:
        logger.error("Re-assessment failed: %s", e, exc_info=True)
        with _job_lock:
            _job_status["status"] = "FAILED"
            _job_status["error_message"] = str(e)


def start_background_reassessment() -> bool:
    """Start the job in a daemon thread. Returns False if it already runs."""
    if not try_start_job():
        return False
    thread = threading.Thread(target=run_reassessment, daemon=True)
    thread.start()
    return True
