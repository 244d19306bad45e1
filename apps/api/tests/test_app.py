"""Tests for application assembly: health, fallbacks, lifespan."""

import pytest
from fastapi.testclient import TestClient

from users_api.config import Settings
from users_api.main import create_app
from users_api.models.health import HealthCheckResponse
from users_common.services.memory_user_repository import InMemoryUserRepository


class FailingRepository(InMemoryUserRepository):
    """Repository whose store is down."""

    def list_users(self):
        raise RuntimeError("store exploded")

    def ping(self) -> None:
        raise ConnectionError("store unreachable")


@pytest.mark.unit
def test_health_check(client: TestClient) -> None:
    response = client.get("/api/health")
    data = response.json()

    assert response.status_code == 200
    assert data["status"] == "ok"
    assert data["environment"] == "test"
    assert data["storage_backend"] == "memory"
    assert data["storage_reachable"] is True
    assert data["message"] == "API is healthy"


@pytest.mark.unit
def test_health_check_reports_unreachable_store(settings: Settings) -> None:
    with TestClient(create_app(settings, repository=FailingRepository())) as client:
        data = client.get("/api/health").json()

    assert data["status"] == "degraded"
    assert data["storage_reachable"] is False


@pytest.mark.unit
def test_unmatched_route_returns_404(client: TestClient) -> None:
    response = client.get("/api/unknown")

    assert response.status_code == 404
    assert response.json() == {"detail": "Not Found", "status": 404}


@pytest.mark.unit
@pytest.mark.parametrize(
    "method,path",
    [
        ("PATCH", "/api/users/5f43ef20c1d4a133e4628181"),
        ("PUT", "/api/users"),
        ("DELETE", "/api/users"),
        ("POST", "/api/users/5f43ef20c1d4a133e4628181"),
    ],
)
def test_unbound_method_and_path_returns_404(client: TestClient, method: str, path: str) -> None:
    response = client.request(method, path, json={"name": "juan"})

    assert response.status_code == 404
    assert response.json() == {"detail": "Not Found", "status": 404}
    assert "allow" not in response.headers


@pytest.mark.unit
def test_unexpected_error_returns_500_with_serialized_error(settings: Settings) -> None:
    app = create_app(settings, repository=FailingRepository())

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/api/users", headers={"origin": "http://localhost:5173"})

    assert response.status_code == 500
    assert response.json() == {"detail": "store exploded", "status": 500}
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


@pytest.mark.unit
def test_lifespan_opens_configured_store(settings: Settings) -> None:
    app = create_app(settings)

    with TestClient(app) as client:
        assert isinstance(app.state.user_repository, InMemoryUserRepository)
        created = client.post("/api/users", json={"name": "esteve", "email": "esteve@gmail.com", "country": "spain"})
        assert created.status_code == 200
        assert len(client.get("/api/users").json()) == 1


@pytest.mark.unit
def test_health_check_response_json() -> None:
    response = HealthCheckResponse(
        status="ok",
        version="0.1.0",
        environment="test",
        storage_backend="memory",
        storage_reachable=True,
    )

    response_dict = response.model_dump()
    assert response_dict["status"] == "ok"
    assert response_dict["message"] == "API is healthy"


class CountingRepository(InMemoryUserRepository):
    """In-memory repository that records close() calls."""

    closed = 0

    def close(self) -> None:
        type(self).closed += 1


@pytest.mark.unit
def test_lifespan_closes_repository_it_opened(settings: Settings, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(CountingRepository, "closed", 0)
    monkeypatch.setattr("users_api.services.InMemoryUserRepository", CountingRepository)
    app = create_app(settings)

    with TestClient(app):
        assert isinstance(app.state.user_repository, CountingRepository)
        assert CountingRepository.closed == 0

    assert CountingRepository.closed == 1


@pytest.mark.unit
def test_lifespan_leaves_caller_repository_open(settings: Settings, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(CountingRepository, "closed", 0)
    repository = CountingRepository()

    with TestClient(create_app(settings, repository=repository)) as client:
        assert client.get("/api/users").status_code == 200

    assert CountingRepository.closed == 0


@pytest.mark.unit
def test_configured_cors_origin_is_allowed() -> None:
    settings = Settings(environment="production", storage_backend="memory", cors_origin="https://users.example.com/")

    with TestClient(create_app(settings)) as client:
        allowed = client.get("/api/users", headers={"origin": "https://users.example.com"})
        other = client.get("/api/users", headers={"origin": "http://localhost:5173"})

    assert allowed.headers["access-control-allow-origin"] == "https://users.example.com"
    assert "access-control-allow-origin" not in other.headers
