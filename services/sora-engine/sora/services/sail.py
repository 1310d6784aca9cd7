"""SAIL resolver: final GRC x final ARC matrix lookup."""

import logging

from sora.exceptions import ConfigurationError
from sora.services.risk_tables import SAIL_MATRIX, AirRiskClass, Sail

logger = logging.getLogger(__name__)


def resolve_sail(final_grc: int, final_arc: AirRiskClass) -> Sail:
    """Look up the SAIL.

    Raises:
        ConfigurationError: the matrix has no cell for the combination. The
            evaluators only emit GRC 1..7, so this signals an engine defect.
    """
    final_arc = AirRiskClass(final_arc)
    sail = SAIL_MATRIX.get(final_grc, {}).get(final_arc)
    if sail is None:
        raise ConfigurationError(
            f"SAIL matrix has no entry for final GRC {final_grc} / {final_arc.value}"
        )
    logger.debug("SAIL %s for GRC %d / %s", sail.value, final_grc, final_arc.value)
    return sail
