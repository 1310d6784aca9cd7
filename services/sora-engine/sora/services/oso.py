"""Operational safety objectives: required robustness per SAIL and user evidence."""

import logging
from typing import Iterable

from sora.exceptions import ConfigurationError
from sora.schemas.assessment import OsoEntry
from sora.schemas.snapshot import OsoEvidence
from sora.services.risk_tables import (
    OSO_CATALOGUE,
    OSO_ROBUSTNESS_CODES,
    SAIL_ORDER,
    Robustness,
    Sail,
)

logger = logging.getLogger(__name__)


def _meets(required: Robustness, declared: Robustness | None) -> bool | None:
    if declared is None:
        return None
    return declared.rank >= required.rank


def resolve_oso_requirements(sail: Sail) -> list[OsoEntry]:
    """One entry per catalogue objective, in catalogue order.

    Objectives the table marks optional are returned with Low required
    robustness and ``optional=True``.
    """
    sail = Sail(sail)
    column = SAIL_ORDER.index(sail)

    entries = []
    for oso_id, category, title, codes in OSO_CATALOGUE:
        if len(codes) != len(SAIL_ORDER):
            raise ConfigurationError(f"{oso_id} has no robustness for every SAIL")
        code = codes[column]
        if code == "O":
            required, optional = Robustness.LOW, True
        elif code in OSO_ROBUSTNESS_CODES:
            required, optional = OSO_ROBUSTNESS_CODES[code], False
        else:
            raise ConfigurationError(f"{oso_id}: unknown robustness code {code!r} for SAIL {sail.value}")
        entries.append(OsoEntry(
            oso_id=oso_id,
            title=title,
            category=category,
            required_robustness=required,
            optional=optional,
        ))
    return entries


def merge_user_evidence(
    entries: list[OsoEntry],
    prior_evidence: Iterable[OsoEvidence | OsoEntry],
) -> list[OsoEntry]:
    """Reattach previously entered evidence to freshly resolved entries.

    Matching is by ``oso_id``. Required robustness always comes from
    ``entries``; evidence for ids not in ``entries`` is dropped.
    """
    by_id = {item.oso_id: item for item in prior_evidence}

    merged = []
    for entry in entries:
        prior = by_id.get(entry.oso_id)
        if prior is None:
            merged.append(entry)
            continue
        merged.append(entry.model_copy(update={
            "user_evidence": prior.user_evidence,
            "evidence_attachments": list(prior.evidence_attachments),
            "user_declared_robustness": prior.user_declared_robustness,
            "meets_requirement": _meets(entry.required_robustness, prior.user_declared_robustness),
        }))

    dropped = set(by_id) - {e.oso_id for e in entries}
    if dropped:
        logger.info("Dropped evidence for unknown OSOs: %s", ", ".join(sorted(dropped)))
    return merged

