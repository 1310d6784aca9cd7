"""Air risk evaluator.

Initial ARC from the airspace encounter category (AEC), then strategic
mitigations, then tactical mitigations against the residual ARC.
"""

import logging
import math
from typing import Iterable

from sora.exceptions import ConfigurationError, ValidationError
from sora.schemas.assessment import AirRiskResult, AppliedMitigation, ExcludedMitigation
from sora.schemas.snapshot import (
    AirspaceEnvironment,
    OperationParameters,
    OperationType,
    TacticalMitigationSelection,
)
from sora.services.risk_tables import (
    AIRPORT_HIGH_DENSITY_CLASSES,
    AIRSPACE_ENCOUNTER_CATEGORIES,
    ALTITUDE_THRESHOLD_M,
    ARC_ORDER,
    CONTROLLED_AIRSPACE,
    FL600_M,
    STRATEGIC_MITIGATION_CREDIT,
    TACTICAL_COMBINATION_CREDIT,
    TACTICAL_CREDIT,
    TMPR_REQUIREMENT,
    AirRiskClass,
    StrategicMitigation,
    TacticalMitigation,
)

logger = logging.getLogger(__name__)


def _lower(arc: AirRiskClass, classes: int) -> AirRiskClass:
    return ARC_ORDER[max(arc.level - classes, 0)]


def encounter_category(operation: OperationParameters, environment: AirspaceEnvironment) -> int:
    """Airspace encounter category (1..12) of the operational volume."""
    if environment.atypical_or_segregated:
        return 12

    height = operation.max_operation_height
    if height is None:
        raise ValidationError("operation.max_operation_height", "required")
    if not math.isfinite(height):
        raise ValidationError("operation.max_operation_height", "must be a finite number")
    if height < 0:
        raise ValidationError("operation.max_operation_height", f"must not be negative (got {height:g})")

    airspace = environment.airspace_class
    if airspace is None:
        raise ValidationError("airspace.airspace_class", "required")

    # Exactly FL600 stays in the lower band, which carries the higher ARC
    if height > FL600_M:
        return 11
    if environment.airport_environment:
        return 1 if airspace in AIRPORT_HIGH_DENSITY_CLASSES else 6

    # Exactly 150 m uses the upper band, which carries the higher ARC
    upper = height >= ALTITUDE_THRESHOLD_M
    if environment.mode_s_veil_or_tmz:
        return 2 if upper else 7
    if airspace in CONTROLLED_AIRSPACE:
        return 3 if upper else 8
    if environment.over_urban_area:
        return 4 if upper else 9
    return 5 if upper else 10


def initial_arc(operation: OperationParameters, environment: AirspaceEnvironment) -> tuple[int, AirRiskClass]:
    aec = encounter_category(operation, environment)
    entry = AIRSPACE_ENCOUNTER_CATEGORIES.get(aec)
    if entry is None:
        raise ConfigurationError(f"No initial ARC for airspace encounter category {aec}")
    return aec, entry[1]


def _apply_strategic(
    arc: AirRiskClass,
    strategic: list[StrategicMitigation],
    environment: AirspaceEnvironment,
    rationale: list[str],
) -> tuple[AirRiskClass, list[AppliedMitigation], list[ExcludedMitigation]]:
    applied = []
    excluded = []
    seen = set()
    for mitigation in strategic:
        if mitigation in seen:
            excluded.append(ExcludedMitigation(
                mitigation_id=mitigation.value,
                reason="category already claimed",
            ))
            rationale.append(f"{mitigation.value} repeated: counted once")
            continue
        seen.add(mitigation)

        credit = STRATEGIC_MITIGATION_CREDIT.get(mitigation)
        if credit is None:
            raise ConfigurationError(f"No credit for strategic mitigation {mitigation.value}")

        if mitigation == StrategicMitigation.COMMON_STRUCTURES_AND_RULES and not (
            environment.mode_s_veil_or_tmz or environment.airspace_class in CONTROLLED_AIRSPACE
        ):
            reason = "common structures and rules require controlled airspace or a Mode-S veil/TMZ"
            excluded.append(ExcludedMitigation(mitigation_id=mitigation.value, reason=reason))
            rationale.append(f"{mitigation.value} not credited: {reason}")
            continue

        reduced = _lower(arc, credit)
        steps = arc.level - reduced.level
        applied.append(AppliedMitigation(mitigation_id=mitigation.value, credit_steps=steps))
        rationale.append(f"strategic {mitigation.value}: {arc.value} -> {reduced.value}")
        arc = reduced
    return arc, applied, excluded


def _visual_qualifies(operation: OperationParameters) -> bool:
    if operation.operation_type is None:
        raise ValidationError("operation.operation_type", "required to claim tactical mitigations")
    if operation.operation_type == OperationType.VLOS:
        return True
    return operation.visual_observers_count >= 1


def _apply_tactical(
    arc: AirRiskClass,
    tactical: list[TacticalMitigationSelection],
    operation: OperationParameters,
    rationale: list[str],
) -> tuple[AirRiskClass, list[AppliedMitigation], list[ExcludedMitigation]]:
    applied = []
    excluded = []
    if not tactical:
        return arc, applied, excluded

    if arc not in TMPR_REQUIREMENT:
        raise ConfigurationError(f"No TMPR defined for {arc.value}")
    tmpr = TMPR_REQUIREMENT[arc]
    if tmpr is None:
        for selection in tactical:
            excluded.append(ExcludedMitigation(
                mitigation_id=selection.mitigation.value,
                reason=f"no tactical credit below {arc.value}",
            ))
        rationale.append(f"residual {arc.value}: tactical mitigations not credited")
        return arc, applied, excluded

    daa = None
    visual = None
    seen = set()
    for selection in tactical:
        # Only the first claim of each mitigation is evaluated
        if selection.mitigation in seen:
            excluded.append(ExcludedMitigation(
                mitigation_id=selection.mitigation.value,
                reason="mitigation already claimed",
            ))
            rationale.append(f"{selection.mitigation.value} repeated: counted once")
            continue
        seen.add(selection.mitigation)

        if selection.mitigation == TacticalMitigation.DETECT_AND_AVOID:
            if selection.robustness.rank >= tmpr.rank:
                daa = selection
            else:
                reason = (
                    f"detect and avoid at {selection.robustness.value} robustness "
                    f"does not meet TMPR {tmpr.value}"
                )
                excluded.append(ExcludedMitigation(mitigation_id=selection.mitigation.value, reason=reason))
                rationale.append(reason)
        elif selection.mitigation == TacticalMitigation.VISUAL_SEE_AND_AVOID:
            if _visual_qualifies(operation):
                visual = selection
            else:
                reason = "visual see-and-avoid requires VLOS or at least one visual observer"
                excluded.append(ExcludedMitigation(mitigation_id=selection.mitigation.value, reason=reason))
                rationale.append(reason)

    if daa is None:
        if visual is not None:
            reason = "visual see-and-avoid needs a qualifying detect and avoid capability"
            excluded.append(ExcludedMitigation(mitigation_id=visual.mitigation.value, reason=reason))
            rationale.append(reason)
        return arc, applied, excluded

    # Credit is capped at one class unless DAA and visual both qualify
    credit = TACTICAL_COMBINATION_CREDIT if visual is not None else TACTICAL_CREDIT
    reduced = _lower(arc, credit)
    applied.append(AppliedMitigation(
        mitigation_id=daa.mitigation.value,
        robustness=daa.robustness,
        credit_steps=min(TACTICAL_CREDIT, arc.level - reduced.level),
    ))
    if visual is not None:
        applied.append(AppliedMitigation(
            mitigation_id=visual.mitigation.value,
            robustness=visual.robustness,
            credit_steps=arc.level - reduced.level - applied[0].credit_steps,
        ))
    rationale.append(f"tactical: {arc.value} -> {reduced.value}")
    return reduced, applied, excluded


def evaluate_air_risk(
    operation: OperationParameters,
    environment: AirspaceEnvironment,
    strategic: Iterable[StrategicMitigation] = (),
    tactical: Iterable[TacticalMitigationSelection] = (),
) -> AirRiskResult:
    """Compute initial, residual (post-strategic) and final ARC."""
    rationale = []

    # 1. Initial ARC
    aec, initial = initial_arc(operation, environment)
    rationale.append(f"AEC {aec} ({AIRSPACE_ENCOUNTER_CATEGORIES[aec][0]}): {initial.value}")

    # 2. Strategic mitigation
    residual, strategic_applied, strategic_excluded = _apply_strategic(
        initial, list(strategic), environment, rationale,
    )

    # 3. Tactical mitigation, against the residual ARC
    final, tactical_applied, tactical_excluded = _apply_tactical(
        residual, list(tactical), operation, rationale,
    )

    logger.debug(
        "Air risk: AEC=%d initial=%s residual=%s final=%s",
        aec, initial.value, residual.value, final.value,
    )

    return AirRiskResult(
        encounter_category=aec,
        initial_arc=initial,
        strategic_mitigations=strategic_applied,
        residual_arc=residual,
        tmpr_required=TMPR_REQUIREMENT.get(residual),
        tactical_mitigations=tactical_applied,
        excluded_mitigations=strategic_excluded + tactical_excluded,
        final_arc=final,
        rationale=rationale,
    )
