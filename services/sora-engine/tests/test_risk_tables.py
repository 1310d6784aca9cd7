from sora.services.risk_tables import (
    ARC_ORDER,
    GRC_FLOOR,
    GROUND_MITIGATION_CREDITS,
    INTRINSIC_GRC,
    OSO_CATALOGUE,
    SAIL_MATRIX,
    GroundMitigation,
    PopulationDensity,
    Robustness,
)


def test_intrinsic_grc_is_non_decreasing_along_rows_and_columns() -> None:
    densities = list(PopulationDensity)
    for density in densities:
        row = [v for v in INTRINSIC_GRC[density] if v is not None]
        assert row == sorted(row)
    for column in range(5):
        values = [INTRINSIC_GRC[d][column] for d in densities if INTRINSIC_GRC[d][column] is not None]
        assert values == sorted(values)


def test_grey_cells_are_only_assemblies_of_people() -> None:
    for density, row in INTRINSIC_GRC.items():
        if density != PopulationDensity.ASSEMBLIES_OF_PEOPLE:
            assert None not in row
    assert INTRINSIC_GRC[PopulationDensity.ASSEMBLIES_OF_PEOPLE][2:] == (None, None, None)


def test_floor_is_controlled_ground_area_row() -> None:
    assert GRC_FLOOR == (1, 1, 2, 3, 3)


def test_credit_table_marks_not_applicable_cells() -> None:
    assert Robustness.HIGH not in GROUND_MITIGATION_CREDITS[GroundMitigation.M1A_SHELTERING]
    assert Robustness.LOW not in GROUND_MITIGATION_CREDITS[GroundMitigation.M1B_OPERATIONAL_RESTRICTIONS]
    assert set(GROUND_MITIGATION_CREDITS[GroundMitigation.M1C_GROUND_OBSERVATION]) == {Robustness.LOW}


def test_sail_matrix_is_complete_and_monotone() -> None:
    for grc in range(1, 8):
        levels = [SAIL_MATRIX[grc][arc].level for arc in ARC_ORDER]
        assert levels == sorted(levels)
    for arc in ARC_ORDER:
        levels = [SAIL_MATRIX[grc][arc].level for grc in range(1, 8)]
        assert levels == sorted(levels)


def test_oso_catalogue_has_24_objectives_with_six_codes() -> None:
    assert len(OSO_CATALOGUE) == 24
    assert len({oso_id for oso_id, *_ in OSO_CATALOGUE}) == 24
    for _, _, _, codes in OSO_CATALOGUE:
        assert len(codes) == 6
        assert set(codes) <= {"O", "L", "M", "H"}
