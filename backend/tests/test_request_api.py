from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from api import server
from operators.service import OperatorDirectory
from records.store import RecordStore
from stats import OperatorAttribution, StatsSettings


def _setup_client(attribution: OperatorAttribution = OperatorAttribution.FIRST_LOG):
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    app = server.create_app(
        store=RecordStore(engine),
        operators=OperatorDirectory(engine),
        stats_settings=StatsSettings(operator_attribution=attribution),
    )
    return TestClient(app)


def _request_body(**overrides) -> dict:
    body = {
        "patientId": "P-100",
        "patientName": "Hanako Sato",
        "patientGender": "female",
        "patientBirthday": "1990-04-01",
        "patientBodyType": "normal",
        "types": ["PANORAMA"],
        "scheduledDate": "2024-05-10",
        "scheduledTime": "10:15",
    }
    body.update(overrides)
    return body


def test_request_lifecycle_over_http():
    client = _setup_client()
    client.post("/api/operators", json={"name": "Ito"})

    created = client.post(
        "/api/requests",
        json=_request_body(types=["PANORAMA", "BITEWING"], bitewingSides=["left", "right"]),
    )
    assert created.status_code == 201
    request = created.json()
    assert request["status"] == "pending"
    assert request["points"] == 498
    assert request["patientAgeAtRequest"] == 34
    assert request["locationFrom"] == "Exam Room"

    pending = client.get("/api/requests", params={"status": "pending"}).json()
    assert [item["id"] for item in pending["items"]] == [request["id"]]

    draft = client.get(f"/api/requests/{request['id']}/completion-draft")
    assert draft.status_code == 200
    assert draft.json()["operatorName"] == "Ito"
    assert draft.json()["logs"]["PANORAMA"] == {"kv": 70, "ma": 10, "sec": 12.0, "operatorName": "Ito"}

    completed = client.post(
        f"/api/requests/{request['id']}/complete",
        json={"operatorName": "Ueda", "logs": {"BITEWING": {"sec": 0.15}}},
    )
    assert completed.status_code == 200
    body = completed.json()
    assert body["status"] == "completed"
    assert set(body["radiationLogs"]) == {"PANORAMA", "BITEWING"}
    assert body["radiationLogs"]["BITEWING"]["sec"] == 0.15
    assert {log["operatorName"] for log in body["radiationLogs"].values()} == {"Ueda"}

    again = client.post(f"/api/requests/{request['id']}/complete", json={})
    assert again.status_code == 409
    assert client.get("/api/requests", params={"status": "pending"}).json()["items"] == []


def test_staff_header_signs_the_draft():
    client = _setup_client()
    request = client.post("/api/requests", json=_request_body()).json()

    draft = client.get(
        f"/api/requests/{request['id']}/completion-draft",
        headers={"X-Clinic-Id": "clinic-1", "X-Staff-Name": "Kato"},
    )
    assert draft.json()["operatorName"] == "Kato"


def test_invalid_request_reports_reason():
    client = _setup_client()

    response = client.post("/api/requests", json=_request_body(types=["BITEWING"]))
    assert response.status_code == 400
    assert response.json()["detail"] == {
        "reason": "bitewing_side_required",
        "message": "Choose the bitewing side (right, left or both)",
    }

    response = client.post("/api/requests", json=_request_body(patientBirthday="2024-05-11"))
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "invalid_date"

    response = client.post("/api/requests", json=_request_body(patientId=""))
    assert response.json()["detail"]["reason"] == "missing_patient_info"

    assert client.get("/api/requests").json()["total"] == 0
    assert client.get("/api/patients").json()["items"] == []


def test_unknown_request_returns_404():
    client = _setup_client()
    assert client.get("/api/requests/nope").status_code == 404
    assert client.get("/api/requests/nope/completion-draft").status_code == 404
    assert client.post("/api/requests/nope/complete", json={}).status_code == 404


def test_completion_rejects_foreign_type():
    client = _setup_client()
    request = client.post("/api/requests", json=_request_body()).json()

    response = client.post(f"/api/requests/{request['id']}/complete", json={"logs": {"CT": {"kv": 90}}})
    assert response.status_code == 400
    assert client.get(f"/api/requests/{request['id']}").json()["status"] == "pending"


def test_patient_endpoints():
    client = _setup_client()
    client.post("/api/requests", json=_request_body())

    patient = client.get("/api/patients/P-100")
    assert patient.status_code == 200
    assert patient.json()["name"] == "Hanako Sato"

    saved = client.put("/api/patients/P-100", json={"bodyType": "large"})
    assert saved.status_code == 200
    assert saved.json()["bodyType"] == "large"
    assert saved.json()["name"] == "Hanako Sato"

    assert client.put("/api/patients/P-200", json={"name": "No Birthday"}).status_code == 400

    history = client.get("/api/patients/P-100/history").json()
    assert len(history["pending"]) == 1
    assert history["completed"] == []

    assert client.delete("/api/patients/P-100").status_code == 409
    assert client.delete("/api/patients/P-100", params={"confirm": "true"}).status_code == 204
    assert client.get("/api/patients/P-100").status_code == 404
    assert client.delete("/api/patients/P-100", params={"confirm": "true"}).status_code == 404

    # the request keeps its patient snapshot
    history = client.get("/api/patients/P-100/history").json()
    assert history["patient"] is None
    assert history["pending"][0]["patientName"] == "Hanako Sato"


def test_history_and_stats():
    client = _setup_client()
    first = client.post("/api/requests", json=_request_body(types=["PANORAMA", "CT"])).json()
    second = client.post(
        "/api/requests",
        json=_request_body(patientId="P-200", patientName="Taro Yamada", types=["DENTAL"], scheduledDate="2024-05-12"),
    ).json()
    client.post("/api/requests", json=_request_body(scheduledDate="2024-05-11"))
    client.post(f"/api/requests/{first['id']}/complete", json={"operatorName": "Ito"})
    client.post(f"/api/requests/{second['id']}/complete", json={"operatorName": ""})

    history = client.get("/api/history").json()
    assert history["total"] == 2

    by_id = client.get("/api/history", params={"q": "p-200"}).json()
    assert [item["id"] for item in by_id["items"]] == [second["id"]]

    ct_only = client.get("/api/history", params={"type": "CT", "dateFrom": "2024-05-10", "dateTo": "2024-05-10"}).json()
    assert [item["id"] for item in ct_only["items"]] == [first["id"]]

    stats = client.get(
        "/api/stats", params={"preset": "custom", "dateFrom": "2024-05-01", "dateTo": "2024-05-31"}
    ).json()
    assert stats["totalPeriod"] == 3
    assert stats["totalCount"] == 2
    assert stats["pendingCount"] == 1
    assert stats["totalPoints"] == 402 + 1170 + 48
    assert stats["averagePoints"] == 810
    assert stats["attribution"] == "first_log"
    counts = {entry["type"]: entry["count"] for entry in stats["byType"]}
    assert counts["PANORAMA"] == 1
    assert counts["CT"] == 1
    assert counts["DENTAL"] == 1
    assert counts["TMJ"] == 0
    assert stats["byOperator"] == [{"name": "Ito", "count": 1}, {"name": "Unspecified", "count": 1}]

    bad = client.get("/api/stats", params={"preset": "custom", "dateFrom": "2024-05-01"})
    assert bad.status_code == 400


def test_reference_and_quote():
    client = _setup_client()

    reference = client.get("/api/reference").json()
    assert reference["childAgeLimit"] == 12
    assert {item["type"]: item["basePoints"] for item in reference["imagingTypes"]}["CT"] == 1170

    exposure = client.get(
        "/api/reference/exposure", params={"type": "PANORAMA", "ageCategory": "child", "bodyType": "large"}
    ).json()
    assert exposure == {"kv": 65, "ma": 8, "sec": 12.0}

    quote = client.post(
        "/api/quote",
        json={"types": ["DENTAL", "BITEWING"], "bitewingSides": ["right"], "birthday": "2015-03-01", "scheduledDate": "2024-03-01"},
    ).json()
    assert quote["age"] == 9
    assert quote["ageCategory"] == "child"
    assert quote["points"] == 96
    assert quote["requiresToothSelection"] is True
    assert quote["exposures"]["DENTAL"] == {"kv": 55, "ma": 5, "sec": 0.06}


def test_operator_endpoints():
    client = _setup_client()
    created = client.post("/api/operators", json={"name": "Ito", "role": "hygienist"})
    assert created.status_code == 201
    operator_id = created.json()["id"]

    assert client.post("/api/operators", json={"name": "  "}).status_code == 422

    updated = client.put(f"/api/operators/{operator_id}", json={"active": False})
    assert updated.json()["active"] is False
    assert client.get("/api/operators", params={"activeOnly": "true"}).json()["items"] == []

    assert client.delete(f"/api/operators/{operator_id}").status_code == 204
    assert client.delete(f"/api/operators/{operator_id}").status_code == 404


def test_health_and_readiness():
    client = _setup_client()
    assert client.get("/api/health").json() == {"status": "healthy"}
    ready = client.get("/api/ready").json()
    assert ready["status"] == "ready"
    assert ready["cacheLoading"] is False


def test_create_request_documents_validation_errors():
    client = _setup_client()
    responses = client.app.openapi()["paths"]["/api/requests"]["post"]["responses"]
    assert responses["400"]["content"]["application/json"]["schema"]["$ref"].endswith("/ValidationErrorResponse")
