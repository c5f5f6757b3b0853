"""Tests for the HTTP surface – uses the bundled form configuration."""

from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)


def test_health():
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["form_sections"] > 0


def test_list_sections():
    response = client.get("/api/v1/forms/patient-record/sections")
    assert response.status_code == 200
    sections = {s["key"]: s for s in response.json()}
    assert sections["insurance"]["is_array"] is True
    assert sections["insurance"]["link_id"] == ["insurance-section", "insurance-section-2"]
    assert sections["attorneyInformation"]["repetitions"] == 1


def test_validate_reports_errors():
    payload = {
        "values": {"reason-for-visit": "Auto accident", "insurance-member-id-2": ""},
        "renderedSectionCounts": {"insurance-section-2": 1},
    }
    response = client.post("/api/v1/forms/patient-record/validate", json=payload)
    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is False
    assert body["errors"]["attorney-mva-firm"]["type"] == "required"
    assert "insurance-member-id-2" not in body["errors"]
    assert body["values"] == payload["values"]


def test_section_visibility():
    url = "/api/v1/forms/patient-record/sections/attorneyInformation/visibility"
    assert client.post(url, json={"values": {"reason-for-visit": "Cold"}}).json()["hidden"] is True
    assert client.post(url, json={"values": {"reason-for-visit": "Auto accident"}}).json()["hidden"] is False

    url = "/api/v1/forms/patient-record/sections/preferredPharmacy/visibility"
    assert client.post(url, json={"values": {}}).json()["hidden"] is True


def test_section_rules_for_repetition():
    url = "/api/v1/forms/patient-record/sections/insurance/rules"
    response = client.post(url, json={"values": {"patient-relationship-to-insured-2": "Self"}, "index": 1})
    assert response.status_code == 200
    body = response.json()
    assert body["link_id"] == "insurance-section-2"
    fields = body["fields"]
    assert fields["insurance-member-id-2"]["required"] == "This field is required"
    assert fields["policy-holder-zip-2"]["pattern"]["message"] == "Must be 5 digits"
    assert fields["insurance-priority-2"]["has_custom_validator"] is True
    assert fields["policy-holder-first-name-2"]["enabled"] is False


def test_section_rules_substitute_text():
    url = "/api/v1/forms/patient-record/sections/responsibleParty/rules"
    body = client.post(url, json={"values": {"responsible-party-relationship": "Self"}}).json()
    notice = body["fields"]["responsible-party-self-notice"]
    assert notice["substitute_text"] == "Details are copied from the patient's record"
    assert notice["required"] is None


def test_array_section_rules_without_index_is_rejected():
    response = client.post("/api/v1/forms/patient-record/sections/insurance/rules", json={"values": {}})
    assert response.status_code == 400
    assert "index" in response.json()["detail"]


def test_unknown_section():
    response = client.post("/api/v1/forms/patient-record/sections/nope/visibility", json={})
    assert response.status_code == 404
