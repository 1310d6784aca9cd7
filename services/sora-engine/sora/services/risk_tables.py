"""SORA lookup tables.

Static data only: intrinsic GRC, ground mitigation credits, airspace
encounter categories, strategic/tactical air mitigations, SAIL matrix and
OSO robustness per SAIL. Ground/air tables follow JARUS SORA 2.5 (Main Body,
Tables 2, 5, 7 and Figure 6); the OSO catalogue is the 24-objective table of
SORA 2.0 (Table 6) that the wizard's OSO step is built around.

Evaluation logic lives in ground_risk / air_risk / sail / oso.
"""

from enum import Enum

TABLE_VERSION = "JARUS SORA 2.5"


class Robustness(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _ROBUSTNESS_RANK[self]


_ROBUSTNESS_RANK = {Robustness.LOW: 1, Robustness.MEDIUM: 2, Robustness.HIGH: 3}


# =====================================================================
# Ground risk
# =====================================================================

class PopulationDensity(str, Enum):
    """Maximum population density of the overflown area (people/km2)."""

    CONTROLLED_GROUND_AREA = "controlled_ground_area"
    REMOTE = "lt_5"
    LIGHTLY_POPULATED = "lt_50"
    SPARSELY_POPULATED = "lt_500"
    SUBURBAN = "lt_5000"
    HIGH_DENSITY_METRO = "lt_50000"
    ASSEMBLIES_OF_PEOPLE = "gt_50000"


# Upper (exclusive) density limit per category, in ascending order.
# A density exactly on a limit belongs to the next category.
DENSITY_LIMITS = [
    (5.0, PopulationDensity.REMOTE),
    (50.0, PopulationDensity.LIGHTLY_POPULATED),
    (500.0, PopulationDensity.SPARSELY_POPULATED),
    (5000.0, PopulationDensity.SUBURBAN),
    (50000.0, PopulationDensity.HIGH_DENSITY_METRO),
]

# UA columns of the iGRC table. Limits are exclusive: a UA exactly on a
# limit is placed in the next (higher-risk) column.
DIMENSION_LIMITS_M = (1.0, 3.0, 8.0, 20.0, 40.0)
SPEED_LIMITS_MS = (25.0, 35.0, 75.0, 120.0, 200.0)
UA_COLUMN_LABELS = ("1m / 25m/s", "3m / 35m/s", "8m / 75m/s", "20m / 120m/s", "40m / 200m/s")

# Small-UA rule: MTOM <= 250 g and max speed <= 25 m/s gives iGRC 1
SMALL_UA_MAX_MTOW_KG = 0.25
SMALL_UA_MAX_SPEED_MS = 25.0
SMALL_UA_GRC = 1

# None marks grey cells (operation not covered by the SORA)
INTRINSIC_GRC = {
    PopulationDensity.CONTROLLED_GROUND_AREA: (1, 1, 2, 3, 3),
    PopulationDensity.REMOTE: (2, 3, 4, 5, 6),
    PopulationDensity.LIGHTLY_POPULATED: (3, 4, 5, 6, 7),
    PopulationDensity.SPARSELY_POPULATED: (4, 5, 6, 7, 8),
    PopulationDensity.SUBURBAN: (5, 6, 7, 8, 9),
    PopulationDensity.HIGH_DENSITY_METRO: (6, 7, 8, 9, 10),
    PopulationDensity.ASSEMBLIES_OF_PEOPLE: (7, 8, None, None, None),
}

# Final GRC may not go below the controlled ground area value of its column
GRC_FLOOR = INTRINSIC_GRC[PopulationDensity.CONTROLLED_GROUND_AREA]

# Highest final GRC handled by the specific category
MAX_SPECIFIC_GRC = 7


class GroundMitigation(str, Enum):
    M1A_SHELTERING = "M1A"
    M1B_OPERATIONAL_RESTRICTIONS = "M1B"
    M1C_GROUND_OBSERVATION = "M1C"
    M2_IMPACT_DYNAMICS = "M2"


# GRC reduction steps per robustness; absent robustness = N/A in the table
GROUND_MITIGATION_CREDITS = {
    GroundMitigation.M1A_SHELTERING: {
        Robustness.LOW: 1,
        Robustness.MEDIUM: 2,
    },
    GroundMitigation.M1B_OPERATIONAL_RESTRICTIONS: {
        Robustness.MEDIUM: 1,
        Robustness.HIGH: 2,
    },
    GroundMitigation.M1C_GROUND_OBSERVATION: {
        Robustness.LOW: 1,
    },
    GroundMitigation.M2_IMPACT_DYNAMICS: {
        Robustness.MEDIUM: 1,
        Robustness.HIGH: 2,
    },
}

# Pairs that may not be claimed together. None matches any robustness.
EXCLUSIVE_GROUND_MITIGATIONS = [
    (
        (GroundMitigation.M1A_SHELTERING, Robustness.MEDIUM),
        (GroundMitigation.M1B_OPERATIONAL_RESTRICTIONS, None),
    ),
]

# Sheltering credit only applies below this MTOM
SHELTERING_MAX_MTOW_KG = 25.0


# =====================================================================
# Air risk
# =====================================================================

class AirRiskClass(str, Enum):
    ARC_A = "ARC-a"
    ARC_B = "ARC-b"
    ARC_C = "ARC-c"
    ARC_D = "ARC-d"

    @property
    def level(self) -> int:
        return ARC_ORDER.index(self)


ARC_ORDER = [
    AirRiskClass.ARC_A,
    AirRiskClass.ARC_B,
    AirRiskClass.ARC_C,
    AirRiskClass.ARC_D,
]


class AirspaceClass(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"
    G = "G"


CONTROLLED_AIRSPACE = {
    AirspaceClass.A,
    AirspaceClass.B,
    AirspaceClass.C,
    AirspaceClass.D,
    AirspaceClass.E,
}

# Airport environments in these classes are AEC 1, others AEC 6
AIRPORT_HIGH_DENSITY_CLASSES = {
    AirspaceClass.A,
    AirspaceClass.B,
    AirspaceClass.C,
    AirspaceClass.D,
}

# 500 ft AGL. A height exactly on the threshold uses the upper band.
ALTITUDE_THRESHOLD_M = 150.0
# FL600. Only strictly above it counts as the upper band (ARC-b).
FL600_M = 18288.0

AIRSPACE_ENCOUNTER_CATEGORIES = {
    1: ("Airport/heliport environment in class B, C or D airspace", AirRiskClass.ARC_D),
    2: ("Above 150 m AGL in Mode-S veil or TMZ", AirRiskClass.ARC_D),
    3: ("Above 150 m AGL in controlled airspace", AirRiskClass.ARC_D),
    4: ("Above 150 m AGL in uncontrolled airspace over urban area", AirRiskClass.ARC_C),
    5: ("Above 150 m AGL in uncontrolled airspace over rural area", AirRiskClass.ARC_C),
    6: ("Airport/heliport environment in class E, F or G airspace", AirRiskClass.ARC_C),
    7: ("Below 150 m AGL in Mode-S veil or TMZ", AirRiskClass.ARC_C),
    8: ("Below 150 m AGL in controlled airspace", AirRiskClass.ARC_C),
    9: ("Below 150 m AGL in uncontrolled airspace over urban area", AirRiskClass.ARC_C),
    10: ("Below 150 m AGL in uncontrolled airspace over rural area", AirRiskClass.ARC_B),
    11: ("Above FL600", AirRiskClass.ARC_B),
    12: ("Atypical or segregated airspace", AirRiskClass.ARC_A),
}


class StrategicMitigation(str, Enum):
    OPERATIONAL_RESTRICTIONS = "operational_restrictions"
    COMMON_STRUCTURES_AND_RULES = "common_structures_and_rules"


# Classes removed by each distinct strategic category
STRATEGIC_MITIGATION_CREDIT = {
    StrategicMitigation.OPERATIONAL_RESTRICTIONS: 1,
    StrategicMitigation.COMMON_STRUCTURES_AND_RULES: 1,
}


class TacticalMitigation(str, Enum):
    DETECT_AND_AVOID = "detect_and_avoid"
    VISUAL_SEE_AND_AVOID = "visual_see_and_avoid"


# Tactical mitigation performance requirement per residual ARC
TMPR_REQUIREMENT = {
    AirRiskClass.ARC_A: None,
    AirRiskClass.ARC_B: Robustness.LOW,
    AirRiskClass.ARC_C: Robustness.MEDIUM,
    AirRiskClass.ARC_D: Robustness.HIGH,
}

TACTICAL_CREDIT = 1
# Qualifying DAA together with qualifying visual see-and-avoid
TACTICAL_COMBINATION_CREDIT = 2


# =====================================================================
# SAIL
# =====================================================================

class Sail(str, Enum):
    I = "I"
    II = "II"
    III = "III"
    IV = "IV"
    V = "V"
    VI = "VI"

    @property
    def level(self) -> int:
        return SAIL_ORDER.index(self) + 1


SAIL_ORDER = [Sail.I, Sail.II, Sail.III, Sail.IV, Sail.V, Sail.VI]

# final GRC -> SAIL per final ARC (a, b, c, d)
SAIL_MATRIX = {
    1: dict(zip(ARC_ORDER, (Sail.I, Sail.II, Sail.IV, Sail.VI))),
    2: dict(zip(ARC_ORDER, (Sail.I, Sail.II, Sail.IV, Sail.VI))),
    3: dict(zip(ARC_ORDER, (Sail.II, Sail.II, Sail.IV, Sail.VI))),
    4: dict(zip(ARC_ORDER, (Sail.III, Sail.III, Sail.IV, Sail.VI))),
    5: dict(zip(ARC_ORDER, (Sail.IV, Sail.IV, Sail.IV, Sail.VI))),
    6: dict(zip(ARC_ORDER, (Sail.V, Sail.V, Sail.V, Sail.VI))),
    7: dict(zip(ARC_ORDER, (Sail.VI, Sail.VI, Sail.VI, Sail.VI))),
}


# =====================================================================
# Operational safety objectives
# =====================================================================

# O = optional, L/M/H = required robustness; one code per SAIL I..VI
OSO_ROBUSTNESS_CODES = {
    "L": Robustness.LOW,
    "M": Robustness.MEDIUM,
    "H": Robustness.HIGH,
}

OSO_CATALOGUE = [
    # Technical issue with the UAS
    ("OSO#01", "technical_issue", "Ensure the operator is competent and/or proven", "OLMHHH"),
    ("OSO#02", "technical_issue", "UAS manufactured by competent and/or proven entity", "OOLMHH"),
    ("OSO#03", "technical_issue", "UAS maintained by competent and/or proven entity", "LLMMHH"),
    ("OSO#04", "technical_issue", "UAS developed to authority recognised design standards", "OOOLMH"),
    ("OSO#05", "technical_issue", "UAS is designed considering system safety and reliability", "OOLMHH"),
    ("OSO#06", "technical_issue", "C3 link performance is appropriate for the operation", "OLLMHH"),
    ("OSO#07", "technical_issue", "Inspection of the UAS (product inspection) to ensure consistency with the ConOps", "LLMMHH"),
    ("OSO#08", "technical_issue", "Operational procedures are defined, validated and adhered to", "LMHHHH"),
    ("OSO#09", "technical_issue", "Remote crew trained and current and able to control the abnormal situation", "LLMMHH"),
    ("OSO#10", "technical_issue", "Safe recovery from technical issue", "LLMMHH"),
    # Deterioration of external systems
    ("OSO#11", "external_systems", "Procedures are in place to handle the deterioration of external systems supporting the operation", "LMHHHH"),
    ("OSO#12", "external_systems", "The UAS is designed to manage the deterioration of external systems supporting the operation", "LLMMHH"),
    ("OSO#13", "external_systems", "External services supporting UAS operations are adequate to the operation", "LLMHHH"),
    # Human error
    ("OSO#14", "human_error", "Operational procedures are defined, validated and adhered to", "LMHHHH"),
    ("OSO#15", "human_error", "Remote crew trained and current and able to control the abnormal situation", "LLMMHH"),
    ("OSO#16", "human_error", "Multi crew coordination", "LLMMHH"),
    ("OSO#17", "human_error", "Remote crew is fit to operate", "LLMMHH"),
    ("OSO#18", "human_error", "Automatic protection of the flight envelope from human errors", "OOLMHH"),
    ("OSO#19", "human_error", "Safe recovery from human error", "OOLMMH"),
    ("OSO#20", "human_error", "A human factors evaluation has been performed and the HMI found appropriate for the mission", "OLLMMH"),
    # Adverse operating conditions
    ("OSO#21", "adverse_conditions", "Operational procedures are defined, validated and adhered to", "LMHHHH"),
    ("OSO#22", "adverse_conditions", "The remote crew is trained to identify critical environmental conditions and to avoid them", "LLMMMH"),
    ("OSO#23", "adverse_conditions", "Environmental conditions for safe operations are defined, measurable and adhered to", "LLMMHH"),
    ("OSO#24", "adverse_conditions", "UAS designed and qualified for adverse environmental conditions", "OOMHHH"),
]
