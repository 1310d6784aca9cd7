import os
import tempfile
import uuid

# Settings are read once and cached; point them at throwaway locations
# before anything from the sora package is imported.
_tmp = tempfile.mkdtemp(prefix="sora-tests-")
os.environ["DB_TYPE"] = "sqlite"
os.environ["SQLITE_PATH"] = os.path.join(_tmp, "sora-test.db")
os.environ["STORAGE_DIR"] = os.path.join(_tmp, "storage")
os.environ["REASSESSMENT_ENABLED"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from sora.schemas.snapshot import SoraSnapshot  # noqa: E402


def remote_multirotor_payload() -> dict:
    """Small multirotor over a remote area in uncontrolled class G, below 150 m."""
    return {
        "operator": {"name": "Aerial Survey GmbH"},
        "drone": {
            "manufacturer": "DJI",
            "model": "Matrice 30",
            "uas_type": "multirotor",
            "max_characteristic_dimension": 0.9,
            "cruise_speed": 15.0,
            "max_speed": 23.0,
            "mtow": 4.0,
        },
        "operation": {
            "operation_type": "VLOS",
            "max_operation_height": 120.0,
            "operating_area": {"population_density": "lt_5"},
        },
        "airspace": {"airspace_class": "G"},
        "ground_mitigations": [{"mitigation": "M1A", "robustness": "low"}],
        "strategic_mitigations": ["operational_restrictions"],
    }


@pytest.fixture
def snapshot_payload() -> dict:
    return remote_multirotor_payload()


@pytest.fixture
def snapshot() -> SoraSnapshot:
    return SoraSnapshot.model_validate(remote_multirotor_payload())


@pytest.fixture
def client():
    from sora.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user_headers() -> dict:
    return {"X-User-Id": f"user-{uuid.uuid4()}"}


@pytest.fixture
def admin_headers() -> dict:
    return {"X-User-Id": f"admin-{uuid.uuid4()}", "X-User-Role": "super_agent"}
