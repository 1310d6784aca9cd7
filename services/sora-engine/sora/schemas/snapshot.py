"""Wizard snapshot consumed by the risk classification engine.

Every field is optional so a half-filled wizard can still be saved; the
evaluators decide which fields they need and raise a field-identifying
ValidationError when one is missing.
"""

from enum import Enum

from pydantic import BaseModel, Field

from sora.services.risk_tables import (
    AirspaceClass,
    GroundMitigation,
    PopulationDensity,
    Robustness,
    StrategicMitigation,
    TacticalMitigation,
)


class UasType(str, Enum):
    MULTIROTOR = "multirotor"
    FIXED_WING = "fixed_wing"
    VTOL_HYBRID = "vtol_hybrid"
    HELICOPTER = "helicopter"
    LIGHTER_THAN_AIR = "lighter_than_air"
    OTHER = "other"


class DroneClass(str, Enum):
    NONE = "none"
    C0 = "C0"
    C1 = "C1"
    C2 = "C2"
    C3 = "C3"
    C4 = "C4"
    C5 = "C5"
    C6 = "C6"
    PROTOTYPE = "prototype"
    SPECIFIC = "specific"
    CERTIFIED = "certified"


class OperationType(str, Enum):
    VLOS = "VLOS"
    EVLOS = "EVLOS"
    BVLOS = "BVLOS"


class DayNight(str, Enum):
    DAY = "day"
    NIGHT = "night"
    DAY_AND_NIGHT = "day_and_night"


class ContainmentLevel(str, Enum):
    BASIC = "basic"
    ENHANCED = "enhanced"


class FileReference(BaseModel):
    """Stored file, as returned by the object storage."""
    name: str
    url: str
    size: int = 0
    content_type: str = ""

    class Config:
        frozen = True


class OperatorInfo(BaseModel):
    name: str | None = None
    registration_number: str | None = None
    manager_name: str | None = None
    operational_contact: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    locations: str | None = None

    class Config:
        frozen = True


class EnvironmentalLimitations(BaseModel):
    max_wind_speed_takeoff: float | None = None  # m/s
    max_gust_speed: float | None = None  # m/s
    min_temperature: float | None = None  # degC
    max_temperature: float | None = None  # degC
    visibility: float | None = None  # m
    ip_rating: str | None = None
    other_limitations: str | None = None

    class Config:
        frozen = True
        allow_inf_nan = False


class DroneParameters(BaseModel):
    manufacturer: str | None = None
    model: str | None = None
    uas_type: UasType | None = None
    serial_number: str | None = None
    class_identification: DroneClass | None = None
    max_characteristic_dimension: float | None = Field(None, description="m")
    cruise_speed: float | None = Field(None, description="m/s")
    max_speed: float | None = Field(None, description="m/s")
    mtow: float | None = Field(None, description="Maximum take-off mass, kg")
    kinetic_energy: float | None = Field(None, description="J")
    environmental_limitations: EnvironmentalLimitations = EnvironmentalLimitations()
    technical_documents: list[FileReference] = []

    class Config:
        frozen = True
        allow_inf_nan = False


class OperatingArea(BaseModel):
    """Reduced classification of the uploaded geographic operating volume."""
    population_density: PopulationDensity | None = None
    population_density_value: float | None = Field(None, ge=0, description="people/km2")

    class Config:
        frozen = True
        allow_inf_nan = False


class OperationParameters(BaseModel):
    description: str | None = None
    operation_type: OperationType | None = None
    dangerous_goods: bool | None = None
    dropping_materials: bool | None = None
    control_multiple_drones: bool | None = None
    day_night: DayNight | None = None
    operation_start_time: str | None = None
    operation_end_time: str | None = None
    max_distance_from_pilot: float | None = Field(None, description="m")
    visual_observers_count: int = Field(0, ge=0)
    pilot_competency: str | None = None
    max_operation_height: float | None = Field(None, description="m AGL")
    adjacent_area_extent: float | None = Field(None, description="km")
    containment_level: ContainmentLevel | None = None
    geo_files: list[FileReference] = []
    operating_area: OperatingArea | None = None

    class Config:
        frozen = True
        allow_inf_nan = False


class AirspaceEnvironment(BaseModel):
    airspace_class: AirspaceClass | None = None
    airport_environment: bool = False
    mode_s_veil_or_tmz: bool = False
    over_urban_area: bool = False
    atypical_or_segregated: bool = False

    class Config:
        frozen = True


class GroundMitigationSelection(BaseModel):
    mitigation: GroundMitigation
    robustness: Robustness

    class Config:
        frozen = True


class TacticalMitigationSelection(BaseModel):
    mitigation: TacticalMitigation
    robustness: Robustness

    class Config:
        frozen = True


class OsoEvidence(BaseModel):
    """What the user typed on the OSO step for one objective."""
    oso_id: str
    user_evidence: str = ""
    evidence_attachments: list[FileReference] = []
    user_declared_robustness: Robustness | None = None

    class Config:
        frozen = True


class SoraSnapshot(BaseModel):
    operator: OperatorInfo = OperatorInfo()
    drone: DroneParameters = DroneParameters()
    operation: OperationParameters = OperationParameters()
    airspace: AirspaceEnvironment = AirspaceEnvironment()
    ground_mitigations: list[GroundMitigationSelection] = []
    strategic_mitigations: list[StrategicMitigation] = []
    tactical_mitigations: list[TacticalMitigationSelection] = []
    oso_evidence: list[OsoEvidence] = []

    class Config:
        frozen = True
