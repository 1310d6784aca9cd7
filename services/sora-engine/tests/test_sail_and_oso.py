import pytest

from sora.exceptions import ConfigurationError
from sora.schemas.snapshot import FileReference, OsoEvidence
from sora.services.oso import merge_user_evidence, resolve_oso_requirements
from sora.services.risk_tables import ARC_ORDER, AirRiskClass, Robustness, Sail
from sora.services.sail import resolve_sail


def test_sail_lookup() -> None:
    assert resolve_sail(1, AirRiskClass.ARC_A) == Sail.I
    assert resolve_sail(4, AirRiskClass.ARC_B) == Sail.III
    assert resolve_sail(6, AirRiskClass.ARC_C) == Sail.V
    assert resolve_sail(2, AirRiskClass.ARC_D) == Sail.VI
    assert resolve_sail(3, "ARC-a") == Sail.II


def test_sail_is_monotone_in_grc_and_arc() -> None:
    for grc in range(1, 7):
        for arc in ARC_ORDER:
            assert resolve_sail(grc, arc).level <= resolve_sail(grc + 1, arc).level
    for grc in range(1, 8):
        levels = [resolve_sail(grc, arc).level for arc in ARC_ORDER]
        assert levels == sorted(levels)


def test_sail_without_matrix_cell_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        resolve_sail(8, AirRiskClass.ARC_A)


def test_sail_one_requires_low_robustness_everywhere() -> None:
    entries = resolve_oso_requirements(Sail.I)
    assert len(entries) == 24
    assert {e.required_robustness for e in entries} == {Robustness.LOW}
    assert any(e.optional for e in entries)


def test_every_sail_resolves_all_objectives_in_catalogue_order() -> None:
    for sail in Sail:
        entries = resolve_oso_requirements(sail)
        assert [e.oso_id for e in entries] == [f"OSO#{i:02d}" for i in range(1, 25)]
        assert all(e.required_robustness is not None for e in entries)


def test_sail_six_requires_high_robustness_everywhere() -> None:
    entries = resolve_oso_requirements(Sail.VI)
    assert {e.required_robustness for e in entries} == {Robustness.HIGH}
    assert not any(e.optional for e in entries)


def test_merge_reattaches_evidence_and_keeps_new_requirement() -> None:
    attachment = FileReference(name="manual.pdf", url="http://localhost/storage/sora-file/s/technical/1_manual.pdf")
    prior = [
        OsoEvidence(
            oso_id="OSO#03",
            user_evidence="Maintenance programme v2",
            evidence_attachments=[attachment],
            user_declared_robustness=Robustness.MEDIUM,
        ),
        OsoEvidence(oso_id="OSO#99", user_evidence="stale"),
    ]

    low = merge_user_evidence(resolve_oso_requirements(Sail.II), prior)
    entry = next(e for e in low if e.oso_id == "OSO#03")
    assert entry.required_robustness == Robustness.LOW
    assert entry.user_evidence == "Maintenance programme v2"
    assert entry.evidence_attachments == [attachment]
    assert entry.meets_requirement is True

    high = merge_user_evidence(resolve_oso_requirements(Sail.V), low)
    entry = next(e for e in high if e.oso_id == "OSO#03")
    assert entry.required_robustness == Robustness.HIGH
    assert entry.user_evidence == "Maintenance programme v2"
    assert entry.meets_requirement is False
    assert "OSO#99" not in {e.oso_id for e in high}


def test_merge_leaves_undeclared_entries_unassessed() -> None:
    merged = merge_user_evidence(
        resolve_oso_requirements(Sail.III),
        [OsoEvidence(oso_id="OSO#01", user_evidence="Ops manual chapter 2")],
    )
    assert merged[0].meets_requirement is None
    assert merged[1].user_evidence == ""
