"""Assessment API endpoints: per-step evaluators and the full pipeline.

Pure computation, no persistence. Engine errors are turned into HTTP
responses by the exception handlers registered in main.
"""

import logging

from fastapi import APIRouter

from sora.schemas.assessment import (
    AirRiskRequest,
    AirRiskResult,
    GroundRiskRequest,
    GroundRiskResult,
    OsoEntry,
    OsoMergeRequest,
    RiskAssessment,
    SailRequest,
    SailResponse,
    StepCompleteness,
)
from sora.schemas.snapshot import SoraSnapshot
from sora.services.air_risk import evaluate_air_risk
from sora.services.assessment import assess
from sora.services.completeness import check_snapshot_completeness
from sora.services.ground_risk import evaluate_ground_risk
from sora.services.oso import merge_user_evidence, resolve_oso_requirements
from sora.services.risk_tables import Sail
from sora.services.sail import resolve_sail

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/assessment/ground-risk", response_model=GroundRiskResult)
async def ground_risk(request: GroundRiskRequest):
    """Intrinsic and final GRC."""
    return evaluate_ground_risk(request.drone, request.operation, request.mitigations)


@router.post("/assessment/air-risk", response_model=AirRiskResult)
async def air_risk(request: AirRiskRequest):
    """Initial, residual and final ARC."""
    return evaluate_air_risk(
        request.operation,
        request.environment,
        request.strategic_mitigations,
        request.tactical_mitigations,
    )


@router.post("/assessment/sail", response_model=SailResponse)
async def sail(request: SailRequest):
    return SailResponse(
        final_grc=request.final_grc,
        final_arc=request.final_arc,
        sail=resolve_sail(request.final_grc, request.final_arc),
    )


@router.get("/assessment/oso/{sail}", response_model=list[OsoEntry])
async def oso_requirements(sail: Sail):
    """Required robustness of every OSO for a SAIL."""
    return resolve_oso_requirements(sail)


@router.post("/assessment/oso/merge", response_model=list[OsoEntry])
async def oso_merge(request: OsoMergeRequest):
    """OSO requirements for a SAIL with the user's previous evidence reattached."""
    return merge_user_evidence(resolve_oso_requirements(request.sail), request.prior_evidence)


@router.post("/assessment/evaluate", response_model=RiskAssessment)
async def evaluate(snapshot: SoraSnapshot):
    """Full pipeline: ground risk, air risk, SAIL, OSO."""
    return assess(snapshot)


@router.post("/assessment/completeness", response_model=list[StepCompleteness])
async def completeness(snapshot: SoraSnapshot):
    """Missing / invalid fields per wizard step."""
    return [StepCompleteness(**r) for r in check_snapshot_completeness(snapshot)]
