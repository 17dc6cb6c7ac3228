# tests/test_api.py
import pytest
from fastapi.testclient import TestClient

from conftest import NOW
from student_insights.api.deps import get_insights_service
from student_insights.core.clock import fixed_clock
from student_insights.core.config import Settings, get_settings
from student_insights.domain.entities.records import PeerRelationship, StudentContext, StudentRecord
from student_insights.domain.services.insights_service import InsightsService
from student_insights.infra.db.session import get_db
from student_insights.main import create_app


class _HealthySession:
    async def execute(self, statement):
        return None


async def _fake_db():
    yield _HealthySession()


def _client(store, settings=None) -> TestClient:
    app = create_app(settings)
    service = InsightsService(source=store, writer=store, clock=fixed_clock(NOW))
    app.dependency_overrides[get_insights_service] = lambda: service
    app.dependency_overrides[get_db] = _fake_db
    return TestClient(app)


@pytest.fixture
def client(store, regression_context):
    store.add(regression_context)
    store.add(StudentContext(student=StudentRecord(id="s-200", name="Lia Chen", class_name="7B")))
    store.edges = [
        PeerRelationship(student_id="s-100", peer_id="s-200", relationship_type="FRIEND", strength=7),
        PeerRelationship(student_id="s-200", peer_id="s-100", relationship_type="FRIEND", strength=7),
    ]
    return _client(store)


def test_health(client):
    r = client.get("/api/v1/health")

    assert r.status_code == 200
    body = r.json()
    assert body["status"]["indicator"] == "operational"
    assert body["components"]["database"]["status"] == "operational"


def test_student_risk(client):
    r = client.get("/api/v1/students/s-100/risk")

    assert r.status_code == 200
    body = r.json()
    assert body["student_id"] == "s-100"
    assert body["risk_level"] == "MEDIUM"
    assert body["confidence"] == 25.0
    assert set(body["factor_scores"]) == {
        "academic", "behavioral", "attendance", "social_emotional",
        "family_support", "peer_relations", "motivation", "health",
    }
    assert body["predictive_indicators"]["short_term"]["horizon"] == "next_week"


def test_unknown_student_is_404(client):
    r = client.get("/api/v1/students/ghost/risk")

    assert r.status_code == 404
    assert r.json() == {"detail": "Student not found: ghost", "student_id": "ghost"}


def test_commit_history(client, store):
    r = client.post("/api/v1/students/s-100/risk/history")

    assert r.status_code == 201
    assert len(store.snapshots) == 1


def test_trend(client):
    r = client.get("/api/v1/students/s-100/risk/trend")

    assert r.status_code == 200
    assert r.json()["trend"] == "STABLE"


def test_patterns(client):
    r = client.get("/api/v1/students/s-100/patterns")

    assert r.status_code == 200
    body = r.json()
    assert [i["title"] for i in body["insights"]] == ["Academic Performance Rising"]
    assert body["info"][0]["severity"] == "INFO"


def test_student_network(client, store):
    r = client.get("/api/v1/students/s-100/network")

    assert r.status_code == 200
    assert r.json()["metrics"]["degree"] == 1
    assert r.json()["peer_groups"] == []
    assert ("s-100", "7B") in store.metrics


def test_class_network(client):
    r = client.get("/api/v1/classes/7B/network")

    assert r.status_code == 200
    body = r.json()
    assert body["total_students"] == 2
    assert body["clusters"][0]["cohesion"] == 1.0
    assert body["clusters"][0]["size"] == 2


def test_batch(client):
    r = client.post("/api/v1/risk/batch", json={"student_ids": ["s-100", "ghost"]})

    assert r.status_code == 200
    body = r.json()
    assert body["total"] == 2
    assert [a["student_id"] for a in body["succeeded"]] == ["s-100"]
    assert body["failed"][0]["student_id"] == "ghost"


def test_batch_requires_ids(client):
    assert client.post("/api/v1/risk/batch", json={"student_ids": []}).status_code == 422


def test_api_key_enforced_when_configured(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "API_KEY", "s3cret")

    assert client.get("/api/v1/students/s-100/risk").status_code == 401
    assert client.get("/api/v1/students/s-100/risk", headers={"X-API-Key": "wrong"}).status_code == 401
    assert client.get("/api/v1/students/s-100/risk", headers={"X-API-Key": "s3cret"}).status_code == 200
    # health stays open for probes
    assert client.get("/api/v1/health").status_code == 200


def test_rate_limit(store, regression_context):
    store.add(regression_context)
    client = _client(store, Settings(RATE_LIMIT="2/minute"))

    codes = [client.get("/api/v1/students/s-100/risk").status_code for _ in range(3)]

    assert codes == [200, 200, 429]


def test_rate_limit_covers_posts_and_reports_the_limit(store, regression_context):
    store.add(regression_context)
    client = _client(store, Settings(RATE_LIMIT="1/minute"))

    assert client.post("/api/v1/risk/batch", json={"student_ids": ["s-100"]}).status_code == 200
    r = client.get("/api/v1/students/s-100/patterns")

    assert r.status_code == 429
    assert r.json()["detail"] == "Rate limit exceeded"
    assert "1 per 1 minute" in r.json()["error"]


def test_each_app_counts_its_own_requests(store, regression_context):
    store.add(regression_context)
    first = _client(store, Settings(RATE_LIMIT="1/minute"))
    second = _client(store, Settings(RATE_LIMIT="1/minute"))

    assert first.get("/api/v1/students/s-100/risk").status_code == 200
    assert second.get("/api/v1/students/s-100/risk").status_code == 200
    assert first.get("/api/v1/students/s-100/risk").status_code == 429
