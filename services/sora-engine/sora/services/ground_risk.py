"""Ground risk evaluator.

Intrinsic GRC from UA size/speed and the population density of the
operating area, then final GRC after M1(A)/M1(B)/M1(C)/M2 mitigations.
"""

import logging
import math
from typing import Iterable

from sora.exceptions import ConfigurationError, OutOfScopeError, ValidationError
from sora.schemas.assessment import AppliedMitigation, ExcludedMitigation, GroundRiskResult
from sora.schemas.snapshot import (
    DroneParameters,
    GroundMitigationSelection,
    OperationParameters,
    OperationType,
)
from sora.services.risk_tables import (
    DENSITY_LIMITS,
    DIMENSION_LIMITS_M,
    EXCLUSIVE_GROUND_MITIGATIONS,
    GRC_FLOOR,
    GROUND_MITIGATION_CREDITS,
    INTRINSIC_GRC,
    MAX_SPECIFIC_GRC,
    SHELTERING_MAX_MTOW_KG,
    SMALL_UA_GRC,
    SMALL_UA_MAX_MTOW_KG,
    SMALL_UA_MAX_SPEED_MS,
    SPEED_LIMITS_MS,
    UA_COLUMN_LABELS,
    GroundMitigation,
    PopulationDensity,
)

logger = logging.getLogger(__name__)

_DENSITY_ORDER = list(PopulationDensity)


def _require_positive(value, field: str) -> float:
    if value is None:
        raise ValidationError(field, "required")
    if not math.isfinite(value):
        raise ValidationError(field, "must be a finite number")
    if value <= 0:
        raise ValidationError(field, f"must be greater than 0 (got {value:g})")
    return float(value)


def classify_population_density(value: float) -> PopulationDensity:
    """Map a density in people/km2 to its category (limits are exclusive)."""
    for limit, category in DENSITY_LIMITS:
        if value < limit:
            return category
    return PopulationDensity.ASSEMBLIES_OF_PEOPLE


def resolve_population_density(operation: OperationParameters) -> PopulationDensity:
    """Density category of the operating area.

    When both a category and a raw density are given, the higher-risk of the
    two is used.
    """
    area = operation.operating_area
    if area is None:
        raise ValidationError("operation.operating_area", "required")

    candidates = []
    if area.population_density is not None:
        candidates.append(area.population_density)
    if area.population_density_value is not None:
        if not math.isfinite(area.population_density_value):
            raise ValidationError(
                "operation.operating_area.population_density_value", "must be a finite number"
            )
        candidates.append(classify_population_density(area.population_density_value))
    if not candidates:
        raise ValidationError("operation.operating_area.population_density", "required")
    return max(candidates, key=_DENSITY_ORDER.index)


def _column_for(value: float, limits: tuple, field: str) -> int:
    # A value exactly on a limit goes to the next column (fail-safe)
    for index, limit in enumerate(limits):
        if value < limit:
            return index
    raise OutOfScopeError(
        field, f"{value:g} is at or above {limits[-1]:g}, outside the SORA iGRC table"
    )


def ua_column(drone: DroneParameters) -> int:
    """iGRC table column: the worse of the dimension and speed columns."""
    dimension = _require_positive(
        drone.max_characteristic_dimension, "drone.max_characteristic_dimension"
    )
    speed = _require_positive(drone.max_speed, "drone.max_speed")
    return max(
        _column_for(dimension, DIMENSION_LIMITS_M, "drone.max_characteristic_dimension"),
        _column_for(speed, SPEED_LIMITS_MS, "drone.max_speed"),
    )


def _check_selections(mitigations: list[GroundMitigationSelection]) -> None:
    seen = set()
    for selection in mitigations:
        if selection.mitigation in seen:
            raise ValidationError(
                "ground_mitigations", f"{selection.mitigation.value} selected more than once"
            )
        seen.add(selection.mitigation)

        credits = GROUND_MITIGATION_CREDITS.get(selection.mitigation)
        if credits is None:
            raise ConfigurationError(
                f"No credit table for ground mitigation {selection.mitigation.value}"
            )
        if selection.robustness not in credits:
            raise ValidationError(
                "ground_mitigations",
                f"{selection.mitigation.value} has no credit at "
                f"{selection.robustness.value} robustness",
            )

    def _claimed(rule) -> bool:
        mitigation, robustness = rule
        return any(
            s.mitigation == mitigation and (robustness is None or s.robustness == robustness)
            for s in mitigations
        )

    for first, second in EXCLUSIVE_GROUND_MITIGATIONS:
        if _claimed(first) and _claimed(second):
            raise ValidationError(
                "ground_mitigations",
                f"{first[0].value} cannot be combined with {second[0].value}",
            )


def _precondition_failure(
    mitigation: GroundMitigation,
    drone: DroneParameters,
    operation: OperationParameters,
) -> str | None:
    """Reason why a selected mitigation cannot be credited, or None."""
    if mitigation == GroundMitigation.M1A_SHELTERING:
        if drone.mtow >= SHELTERING_MAX_MTOW_KG:
            return (
                f"sheltering requires MTOM below {SHELTERING_MAX_MTOW_KG:g} kg "
                f"(MTOM {drone.mtow:g} kg)"
            )
    elif mitigation == GroundMitigation.M1C_GROUND_OBSERVATION:
        if operation.operation_type is None:
            raise ValidationError("operation.operation_type", "required to claim ground observation")
        if operation.operation_type != OperationType.VLOS and operation.visual_observers_count < 1:
            return "ground observation requires VLOS or at least one visual observer"
    return None


def evaluate_ground_risk(
    drone: DroneParameters,
    operation: OperationParameters,
    mitigations: Iterable[GroundMitigationSelection] = (),
) -> GroundRiskResult:
    """Compute intrinsic and final GRC.

    Raises:
        ValidationError: a required field is missing or a mitigation
            selection is not allowed by the credit table.
        OutOfScopeError: the UA or the final GRC is outside the SORA.
    """
    mitigations = list(mitigations)
    rationale = []

    mtow = _require_positive(drone.mtow, "drone.mtow")
    speed = _require_positive(drone.max_speed, "drone.max_speed")
    column = ua_column(drone)
    density = resolve_population_density(operation)
    _check_selections(mitigations)

    # 1. Intrinsic GRC
    row = INTRINSIC_GRC.get(density)
    if row is None or len(row) <= column:
        raise ConfigurationError(f"iGRC table has no cell for {density.value} / column {column}")
    if mtow <= SMALL_UA_MAX_MTOW_KG and speed <= SMALL_UA_MAX_SPEED_MS:
        intrinsic = SMALL_UA_GRC
        rationale.append(
            f"UA of {mtow:g} kg at {speed:g} m/s: iGRC {SMALL_UA_GRC} (250 g rule)"
        )
    else:
        intrinsic = row[column]
        if intrinsic is None:
            raise OutOfScopeError(
                "operation.operating_area.population_density",
                f"{UA_COLUMN_LABELS[column]} UA over {density.value} is not covered by the SORA",
            )
        rationale.append(
            f"iGRC {intrinsic}: column {UA_COLUMN_LABELS[column]}, density {density.value}"
        )

    # 2. Mitigation credits
    applied = []
    excluded = []
    for selection in mitigations:
        reason = _precondition_failure(selection.mitigation, drone, operation)
        if reason:
            excluded.append(ExcludedMitigation(mitigation_id=selection.mitigation.value, reason=reason))
            rationale.append(f"{selection.mitigation.value} not credited: {reason}")
            continue
        steps = GROUND_MITIGATION_CREDITS[selection.mitigation][selection.robustness]
        applied.append(
            AppliedMitigation(
                mitigation_id=selection.mitigation.value,
                robustness=selection.robustness,
                credit_steps=steps,
            )
        )
        rationale.append(
            f"{selection.mitigation.value} ({selection.robustness.value}): -{steps}"
        )

    # 3. Final GRC, clamped at the column floor
    floor = min(GRC_FLOOR[column], intrinsic)
    total_credit = sum(m.credit_steps for m in applied)
    final = max(floor, intrinsic - total_credit)
    if intrinsic - total_credit < floor:
        rationale.append(f"final GRC clamped at column floor {floor}")
    if final > MAX_SPECIFIC_GRC:
        raise OutOfScopeError(
            "ground_mitigations",
            f"final GRC {final} is above {MAX_SPECIFIC_GRC}: certified category",
        )

    logger.debug(
        "Ground risk: iGRC=%d credit=%d final=%d (column=%d, density=%s)",
        intrinsic, total_credit, final, column, density.value,
    )

    return GroundRiskResult(
        intrinsic_grc=intrinsic,
        ua_column=UA_COLUMN_LABELS[column],
        population_density=density,
        applied_mitigations=applied,
        excluded_mitigations=excluded,
        grc_floor=floor,
        final_grc=final,
        rationale=rationale,
    )
