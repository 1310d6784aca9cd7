import inspect
from urllib.parse import urlparse

from sora.services.reassessment import get_job_status, run_reassessment, try_start_job


def test_health(client) -> None:
    response = client.get("/api/sora/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["db_type"] == "sqlite"
    assert body["table_version"] == "JARUS SORA 2.5"


def test_evaluate_snapshot(client, snapshot_payload) -> None:
    response = client.post("/api/sora/assessment/evaluate", json=snapshot_payload)
    assert response.status_code == 200
    body = response.json()
    assert body["ground"]["final_grc"] == 1
    assert body["air"]["final_arc"] == "ARC-a"
    assert body["sail"] == "I"
    assert len(body["oso"]) == 24


def test_validation_error_response(client, snapshot_payload) -> None:
    snapshot_payload["drone"]["mtow"] = None
    response = client.post("/api/sora/assessment/evaluate", json=snapshot_payload)
    assert response.status_code == 422
    assert response.json()["error"] == {
        "code": "VALIDATION_ERROR",
        "field": "drone.mtow",
        "message": "required",
    }


def test_out_of_scope_response(client, snapshot_payload) -> None:
    snapshot_payload["drone"]["max_characteristic_dimension"] = 45.0
    response = client.post("/api/sora/assessment/evaluate", json=snapshot_payload)
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "OUT_OF_SCOPE"


def test_per_step_endpoints(client, snapshot_payload) -> None:
    ground = client.post("/api/sora/assessment/ground-risk", json={
        "drone": snapshot_payload["drone"],
        "operation": snapshot_payload["operation"],
        "mitigations": snapshot_payload["ground_mitigations"],
    })
    assert ground.status_code == 200
    assert ground.json()["intrinsic_grc"] == 2

    air = client.post("/api/sora/assessment/air-risk", json={
        "operation": snapshot_payload["operation"],
        "environment": snapshot_payload["airspace"],
        "strategic_mitigations": ["operational_restrictions"],
    })
    assert air.status_code == 200
    assert air.json()["residual_arc"] == "ARC-a"

    sail = client.post("/api/sora/assessment/sail", json={"final_grc": 5, "final_arc": "ARC-b"})
    assert sail.json()["sail"] == "IV"

    oso = client.get("/api/sora/assessment/oso/IV")
    assert oso.status_code == 200
    assert len(oso.json()) == 24


def test_sail_without_matrix_cell_is_server_error(client) -> None:
    response = client.post("/api/sora/assessment/sail", json={"final_grc": 9, "final_arc": "ARC-a"})
    assert response.status_code == 500
    assert response.json()["error"]["code"] == "CONFIGURATION_ERROR"


def test_oso_merge_endpoint(client) -> None:
    response = client.post("/api/sora/assessment/oso/merge", json={
        "sail": "VI",
        "prior_evidence": [{"oso_id": "OSO#05", "user_evidence": "FHA", "user_declared_robustness": "high"}],
    })
    entry = next(e for e in response.json() if e["oso_id"] == "OSO#05")
    assert entry["user_evidence"] == "FHA"
    assert entry["meets_requirement"] is True


def test_completeness_endpoint(client) -> None:
    response = client.post("/api/sora/assessment/completeness", json={})
    assert response.status_code == 200
    assert [s["step"] for s in response.json()] == ["operator-info", "conops", "ground-risk", "air-risk"]


def test_studies_require_identity(client) -> None:
    assert client.get("/api/sora/studies").status_code == 401


def test_study_lifecycle(client, snapshot_payload, user_headers) -> None:
    created = client.post(
        "/api/sora/studies", json={"name": "Survey A", "snapshot": snapshot_payload}, headers=user_headers,
    )
    assert created.status_code == 201
    study = created.json()
    assert study["owner"] == user_headers["X-User-Id"]
    assert study["data"]["assessment"]["sail"] == "I"
    assert study["data"]["assessment_error"] is None

    listed = client.get("/api/sora/studies", headers=user_headers).json()
    assert [(s["id"], s["sail"]) for s in listed] == [(study["id"], "I")]

    snapshot_payload["airspace"] = {"airspace_class": "C"}
    updated = client.put(
        f"/api/sora/studies/{study['id']}",
        json={"name": "Survey A v2", "snapshot": snapshot_payload},
        headers=user_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["name"] == "Survey A v2"
    assert updated.json()["data"]["assessment"]["air"]["final_arc"] == "ARC-b"

    deleted = client.delete(f"/api/sora/studies/{study['id']}", headers=user_headers)
    assert deleted.status_code == 200
    assert client.get(f"/api/sora/studies/{study['id']}", headers=user_headers).status_code == 404


def test_incomplete_study_is_saved_with_error(client, user_headers) -> None:
    response = client.post(
        "/api/sora/studies", json={"name": "Draft", "snapshot": {}}, headers=user_headers,
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["assessment"] is None
    assert data["assessment_error"]["code"] == "VALIDATION_ERROR"


def test_studies_are_scoped_to_owner(client, snapshot_payload, user_headers, admin_headers) -> None:
    study = client.post(
        "/api/sora/studies", json={"name": "Private", "snapshot": snapshot_payload}, headers=user_headers,
    ).json()

    other = {"X-User-Id": "someone-else"}
    assert client.get(f"/api/sora/studies/{study['id']}", headers=other).status_code == 404
    assert client.delete(f"/api/sora/studies/{study['id']}", headers=other).status_code == 404

    as_admin = client.get(f"/api/sora/studies/{study['id']}", headers=admin_headers)
    assert as_admin.status_code == 200
    assert as_admin.json()["owner"] == user_headers["X-User-Id"]


def test_export_dossier(client, snapshot_payload, user_headers) -> None:
    study = client.post(
        "/api/sora/studies", json={"name": "Export", "snapshot": snapshot_payload}, headers=user_headers,
    ).json()
    dossier = client.get(f"/api/sora/studies/{study['id']}/export", headers=user_headers)
    assert dossier.status_code == 200
    body = dossier.json()
    assert body["study_id"] == study["id"]
    assert body["table_version"] == "JARUS SORA 2.5"
    assert body["assessment"]["sail"] == "I"
    assert body["snapshot"]["drone"]["model"] == "Matrice 30"


def test_file_upload_download_and_delete(client, snapshot_payload, user_headers) -> None:
    study = client.post(
        "/api/sora/studies", json={"name": "Files", "snapshot": snapshot_payload}, headers=user_headers,
    ).json()

    upload = client.post(
        f"/api/sora/studies/{study['id']}/files/geo",
        files={"file": ("area.kml", b"<kml/>", "application/vnd.google-earth.kml+xml")},
        headers=user_headers,
    )
    assert upload.status_code == 201
    ref = upload.json()
    assert ref["name"] == "area.kml"
    assert f"/sora-file/{study['id']}/geo/" in ref["url"]

    served = client.get(urlparse(ref["url"]).path)
    assert served.status_code == 200
    assert served.content == b"<kml/>"

    bad_category = client.post(
        f"/api/sora/studies/{study['id']}/files/video",
        files={"file": ("a.mp4", b"x", "video/mp4")},
        headers=user_headers,
    )
    assert bad_category.status_code == 422

    removed = client.delete(
        f"/api/sora/studies/{study['id']}/files", params={"url": ref["url"]}, headers=user_headers,
    )
    assert removed.status_code == 200
    assert client.get(urlparse(ref["url"]).path).status_code == 404


def test_reassessment_requires_admin(client, user_headers) -> None:
    assert client.post("/api/sora/studies/reassess", headers=user_headers).status_code == 403


def test_reassessment_job_updates_status(client, snapshot_payload, user_headers, admin_headers) -> None:
    client.post("/api/sora/studies", json={"name": "Nightly", "snapshot": snapshot_payload}, headers=user_headers)

    assert try_start_job()
    assert not try_start_job()
    run_reassessment()

    status = get_job_status()
    assert status["status"] == "COMPLETED"
    assert status["processed_studies"] == status["total_studies"] >= 1
    assert status["changed_studies"] == 0

    response = client.get("/api/sora/studies/reassess/status", headers=admin_headers)
    assert response.json()["status"] == "COMPLETED"


def test_reports_for_owner(client, snapshot_payload, user_headers) -> None:
    client.post("/api/sora/studies", json={"name": "R1", "snapshot": snapshot_payload}, headers=user_headers)
    client.post("/api/sora/studies", json={"name": "R2", "snapshot": {}}, headers=user_headers)

    distribution = client.get("/api/sora/reports/sail-distribution", headers=user_headers).json()
    assert {d["sail"]: d["count"] for d in distribution}["I"] == 1

    matrix = client.get("/api/sora/reports/risk-matrix", headers=user_headers).json()
    assert matrix["total_assessed"] == 1
    assert matrix["counts"]["1"]["ARC-a"] == 1

    compliance = client.get("/api/sora/reports/oso-compliance", headers=user_headers).json()
    assert len(compliance) == 24
    assert all(c["declared_count"] == 0 for c in compliance)


def test_nan_height_is_rejected(client) -> None:
    response = client.post(
        "/api/sora/assessment/air-risk",
        content='{"operation": {"max_operation_height": NaN}, "environment": {"airspace_class": "G"}}',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 422


def test_study_routes_touching_the_database_run_in_threadpool() -> None:
    from sora.routers import studies

    for handler in (studies.upload_file, studies.delete_file, studies.get_study, studies.export_study):
        assert not inspect.iscoroutinefunction(handler)
