"""Report API endpoints over stored studies: SAIL distribution, risk matrix, OSO compliance."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from sora.database import sync_engine
from sora.dependencies import get_principal
from sora.schemas.reports import OsoCompliance, RiskMatrix, SailDistribution
from sora.services.study_reports import (
    compute_oso_compliance,
    compute_risk_matrix,
    compute_sail_distribution,
    load_study_frame,
)
from sora.services.study_store import Principal

logger = logging.getLogger(__name__)
router = APIRouter()


def _frame(principal: Principal):
    try:
        return load_study_frame(sync_engine, principal)
    except Exception as e:
        logger.error("Failed to load study data: %s", e)
        raise HTTPException(status_code=500, detail="Failed to load study data")


@router.get("/reports/sail-distribution", response_model=list[SailDistribution])
def get_sail_distribution(principal: Principal = Depends(get_principal)):
    """Study count per SAIL."""
    return [SailDistribution(**r) for r in compute_sail_distribution(_frame(principal))]


@router.get("/reports/risk-matrix", response_model=RiskMatrix)
def get_risk_matrix(principal: Principal = Depends(get_principal)):
    """Final GRC x final ARC counts."""
    return RiskMatrix(**compute_risk_matrix(_frame(principal)))


@router.get("/reports/oso-compliance", response_model=list[OsoCompliance])
def get_oso_compliance(principal: Principal = Depends(get_principal)):
    return [OsoCompliance(**r) for r in compute_oso_compliance(_frame(principal))]
