"""Full SORA pipeline over one wizard snapshot."""

import logging

from sora.schemas.assessment import RiskAssessment
from sora.schemas.snapshot import SoraSnapshot
from sora.services.air_risk import evaluate_air_risk
from sora.services.ground_risk import evaluate_ground_risk
from sora.services.oso import merge_user_evidence, resolve_oso_requirements
from sora.services.risk_tables import TABLE_VERSION
from sora.services.sail import resolve_sail

logger = logging.getLogger(__name__)


def assess(snapshot: SoraSnapshot) -> RiskAssessment:
    """Ground risk, air risk, SAIL and OSO requirements for ``snapshot``.

    All-or-nothing: any ValidationError or ConfigurationError propagates and
    no partial result is produced.
    """
    ground = evaluate_ground_risk(snapshot.drone, snapshot.operation, snapshot.ground_mitigations)
    air = evaluate_air_risk(
        snapshot.operation,
        snapshot.airspace,
        snapshot.strategic_mitigations,
        snapshot.tactical_mitigations,
    )
    sail = resolve_sail(ground.final_grc, air.final_arc)
    oso = merge_user_evidence(resolve_oso_requirements(sail), snapshot.oso_evidence)

    logger.debug(
        "Assessment: GRC %d -> %d, %s -> %s, SAIL %s",
        ground.intrinsic_grc, ground.final_grc,
        air.initial_arc.value, air.final_arc.value, sail.value,
    )

    return RiskAssessment(
        table_version=TABLE_VERSION,
        ground=ground,
        air=air,
        sail=sail,
        oso=oso,
    )
