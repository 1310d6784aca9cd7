"""Wizard step completeness rules.

Checks a snapshot against the fields each wizard step expects before the
user may move on. Produces the list of missing / invalid fields per step.
"""

import logging

from sora.schemas.snapshot import OperationType, SoraSnapshot

logger = logging.getLogger(__name__)

# Expected fields per wizard step.
# "required": must be set (non-empty string / list), "positive": > 0,
# "non_negative": >= 0.
STEP_REQUIREMENTS = {
    "operator-info": {
        "required": [
            "operator.name",
            "operator.registration_number",
            "operator.manager_name",
            "operator.operational_contact",
            "operator.address",
            "operator.phone",
            "operator.email",
            "operator.start_date",
            "operator.end_date",
            "operator.locations",
        ],
        "positive": [],
        "non_negative": [],
    },
    "conops": {
        "required": [
            "drone.manufacturer",
            "drone.model",
            "drone.uas_type",
            "drone.serial_number",
            "drone.class_identification",
            "drone.environmental_limitations.min_temperature",
            "drone.environmental_limitations.max_temperature",
            "drone.environmental_limitations.visibility",
            "operation.operation_type",
            "operation.dangerous_goods",
            "operation.dropping_materials",
            "operation.control_multiple_drones",
            "operation.day_night",
            "operation.operation_start_time",
            "operation.operation_end_time",
            "operation.pilot_competency",
            "operation.geo_files",
        ],
        "positive": [
            "drone.max_characteristic_dimension",
            "drone.cruise_speed",
            "drone.max_speed",
            "drone.mtow",
        ],
        "non_negative": [
            "drone.environmental_limitations.max_wind_speed_takeoff",
            "drone.environmental_limitations.max_gust_speed",
            "operation.max_distance_from_pilot",
        ],
    },
    "ground-risk": {
        "required": ["operation.operating_area"],
        "positive": [],
        "non_negative": [],
    },
    "air-risk": {
        "required": ["airspace.airspace_class"],
        "positive": [],
        "non_negative": ["operation.max_operation_height"],
    },
}

WIZARD_STEPS = list(STEP_REQUIREMENTS)


def _resolve(snapshot: SoraSnapshot, path: str):
    value = snapshot
    for part in path.split("."):
        value = getattr(value, part, None)
        if value is None:
            return None
    return value


def _has_field(snapshot: SoraSnapshot, path: str) -> bool:
    val = _resolve(snapshot, path)
    if val is None:
        return False
    if isinstance(val, str) and val.strip() == "":
        return False
    if isinstance(val, (list, tuple)) and not val:
        return False
    return True


def check_step_completeness(snapshot: SoraSnapshot, step: str) -> dict:
    """Check one wizard step.

    Returns:
        {
            "step": "conops",
            "complete": False,
            "missing_required": ["drone.model", ...],
            "invalid_values": ["drone.mtow", ...],
        }
    """
    profile = STEP_REQUIREMENTS.get(step)
    if profile is None:
        raise KeyError(f"Unknown wizard step {step!r}; expected one of {WIZARD_STEPS}")

    missing_required = [f for f in profile["required"] if not _has_field(snapshot, f)]
    invalid_values = []

    for field in profile["positive"]:
        val = _resolve(snapshot, field)
        if val is None:
            missing_required.append(field)
        elif val <= 0:
            invalid_values.append(field)

    for field in profile["non_negative"]:
        val = _resolve(snapshot, field)
        if val is None:
            missing_required.append(field)
        elif val < 0:
            invalid_values.append(field)

    # EVLOS relies on trained observers
    if step == "conops" and snapshot.operation.operation_type == OperationType.EVLOS:
        if snapshot.operation.visual_observers_count < 1:
            invalid_values.append("operation.visual_observers_count")

    return {
        "step": step,
        "complete": not missing_required and not invalid_values,
        "missing_required": missing_required,
        "invalid_values": invalid_values,
    }


def check_snapshot_completeness(snapshot: SoraSnapshot) -> list[dict]:
    """Completeness of every wizard step, in wizard order."""
    results = [check_step_completeness(snapshot, step) for step in WIZARD_STEPS]
    logger.debug(
        "Completeness: %d/%d steps complete",
        sum(1 for r in results if r["complete"]),
        len(results),
    )
    return results
