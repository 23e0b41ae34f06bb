import pytest
from fastapi.testclient import TestClient

from payouts.errors import UpstreamServiceError
from payouts.models import MatchResult
from payouts_api.application.ports.match_extraction import MatchExtractionPort
from payouts_api.application.use_cases.settings import SettingsService
from payouts_api.dependencies import get_extraction, get_report_store, get_settings_service
from payouts_api.infrastructure.adapters.memory_store import InMemoryReportStore, InMemorySettingsStore
from payouts_api.main import app

IMAGE = {"data": "aGk=", "mimeType": "image/png"}


class FakeExtraction(MatchExtractionPort):
    def __init__(self):
        self.results = [
            MatchResult(["Ana", "Bia"], kills=6, placement=1),
            MatchResult(["Caio"], kills=2, placement=2),
        ]
        self.error = None

    def extract_matches(self, image):
        if self.error is not None:
            raise self.error
        return list(self.results)

    def extract_texts(self, images):
        return ["Ana", "Bia"]


@pytest.fixture
def extraction():
    return FakeExtraction()


@pytest.fixture
def client(extraction):
    settings = SettingsService(InMemorySettingsStore())
    settings.hydrate()
    store = InMemoryReportStore()
    app.dependency_overrides[get_extraction] = lambda: extraction
    app.dependency_overrides[get_report_store] = lambda: store
    app.dependency_overrides[get_settings_service] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_calculate(client) -> None:
    resp = client.post("/api/calculate", json={"text": "6,50\n0,50\n153.364.624-46\n0,50"})
    assert resp.status_code == 200
    assert resp.json() == {"values": [6.5, 0.5, 0.5], "total": 7.5}


def test_calculate_requires_text(client) -> None:
    resp = client.post("/api/calculate", json={})
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_analyze_requires_an_image(client) -> None:
    resp = client.post("/api/analyze", json={"image": {"data": "aGk="}})
    assert resp.status_code == 400
    assert "error" in resp.json()


def test_analyze_returns_match_results(client) -> None:
    resp = client.post("/api/analyze", json={"image": IMAGE})
    assert resp.status_code == 200
    assert resp.json()[0] == {"playerNames": ["Ana", "Bia"], "kills": 6, "placement": 1}


def test_upstream_errors_are_json(client, extraction) -> None:
    extraction.error = UpstreamServiceError("Resource has been exhausted", status=429)
    resp = client.post("/api/analyze", json={"image": IMAGE})
    assert resp.status_code == 502
    assert resp.json() == {"error": "Resource has been exhausted"}


def test_ocr(client) -> None:
    resp = client.post("/api/ocr", json={"images": [IMAGE]})
    assert resp.json() == {"texts": ["Ana", "Bia"], "summary": "Ana e Bia"}


def test_analysis_report_lifecycle(client) -> None:
    resp = client.post("/api/analysis", json={"images": [IMAGE], "slotsSold": 24, "tournament": "Copa"})
    assert resp.status_code == 200
    report = resp.json()
    assert [r["rank"] for r in report["results"]] == [1, 2]
    assert report["results"][0]["earnings"]["total"] == 28.0
    assert "RESULTADO FINAL" in report["resultsText"]

    listed = client.get("/api/reports").json()
    assert [r["id"] for r in listed] == [report["id"]]

    renamed = client.patch(f"/api/reports/{report['id']}", json={"tournament": "Final"}).json()
    assert renamed["tournament"] == "Final"

    dashboard = client.get("/api/dashboard", params={"playerName": "bia"}).json()
    assert dashboard["kpis"]["matches"] == 1
    assert dashboard["kpis"]["totalCollected"] == 120.0
    assert dashboard["leaderboards"]["topKills"] == [{"name": "Bia", "kills": 3.0}]
    assert dashboard["rows"][0]["kills"] == 3.0
    assert dashboard["tournaments"] == ["Final"]

    backup = client.get("/api/reports/backup").json()
    assert backup[0]["config"]["slotsSold"] == 24

    assert client.delete(f"/api/reports/{report['id']}").status_code == 200
    assert client.get(f"/api/reports/{report['id']}").status_code == 404


def test_failed_analysis_saves_nothing(client, extraction) -> None:
    extraction.error = UpstreamServiceError("Inference service unreachable")
    resp = client.post("/api/analysis", json={"images": [IMAGE]})
    assert resp.status_code == 502
    assert resp.json() == {"error": "Inference service unreachable"}
    assert client.get("/api/reports").json() == []


def test_clear_reports(client) -> None:
    client.post("/api/analysis", json={"images": [IMAGE]})
    assert client.delete("/api/reports").json() == {"deleted": 1}


def test_unknown_report(client) -> None:
    resp = client.get("/api/reports/nope")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Report nope not found."}


def test_settings_roundtrip(client) -> None:
    body = client.get("/api/settings").json()
    assert body["settings"]["entryFee"] is None
    assert body["effective"]["entryFee"] == 5.0

    updated = client.patch("/api/settings", json={"entryFee": 6, "adjustmentMode": "fixed"}).json()
    assert updated["settings"]["entryFee"] == 6.0
    assert updated["effective"]["adjustmentMode"] == "fixed"

    resp = client.patch("/api/settings", json={"entryFee": -1})
    assert resp.status_code == 400


@pytest.mark.parametrize(
    "rules",
    [
        {"placementPrizes": [1, 2], "killPrize": 0.5},
        {"placementPrizes": {"1": 10}, "killPrize": -3},
        {"placementPrizes": {"1": 10}, "killPrize": "abc"},
    ],
)
def test_malformed_prize_rules_are_rejected(client, rules) -> None:
    resp = client.patch("/api/settings", json={"prizeRules": rules})
    assert resp.status_code == 400
    assert client.get("/api/settings").json()["settings"]["prizeRules"] is None


def test_prize_preview(client) -> None:
    body = client.post("/api/prizes/preview", json={"slotsSold": 12}).json()
    assert body["collected"] == 60.0
    assert body["adjustedPrizes"]["placementPrizes"]["1"] == pytest.approx(14.12, abs=0.01)
    assert body["adjustedPrizes"]["killPrize"] == 0.5

    empty = client.post("/api/prizes/preview", json={"slotsSold": 0}).json()
    assert empty["adjustedPrizes"] is None
    assert empty["prizeTable"]["placementPrizes"]["1"] == 25.0


def test_websocket_analysis(client) -> None:
    with client.websocket_connect("/ws/analysis") as ws:
        ws.send_json({"action": "analyze", "images": [IMAGE], "slotsSold": 24})
        messages = []
        while True:
            message = ws.receive_json()
            messages.append(message)
            if message["status"] in ("completed", "error"):
                break
    assert messages[0]["status"] == "connecting"
    assert messages[-1]["status"] == "completed"
    assert messages[-1]["report"]["results"][0]["matchResult"]["playerNames"] == ["Ana", "Bia"]


def test_websocket_rejects_unknown_action(client) -> None:
    with client.websocket_connect("/ws/analysis") as ws:
        ws.send_json({"action": "generate"})
        assert ws.receive_json()["status"] == "error"
