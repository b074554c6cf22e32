"""
Basic tests for the Horizon Telemetry API.

This module contains tests for the application shell: root endpoint,
documentation, CORS and configuration.
"""

import pytest
from fastapi.testclient import TestClient

from horizon_api.main import app
from horizon_api.config import Settings, settings
from horizon_api.utils.logging_config import get_logger, setup_logging


@pytest.fixture
def client():
    """Test client fixture."""
    return TestClient(app)


def test_root_endpoint(client):
    """Test the root endpoint returns correct response."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Welcome to Horizon Telemetry API"
    assert data["version"] == "1.0.0"
    assert data["docs"] == "/docs"
    assert data["redoc"] == "/redoc"


def test_openapi_docs_available(client):
    """Test that OpenAPI documentation is available."""
    response = client.get("/docs")
    assert response.status_code == 200

    response = client.get("/api/openapi.json")
    assert response.status_code == 200
    data = response.json()
    assert "/api/analysis/{node_name}/{period}" in data["paths"]
    assert "/api/data/{node_name}/{base_station}/{period}" in data["paths"]


def test_cors_middleware_enabled(client):
    """Test that CORS middleware is enabled."""
    response = client.get("/", headers={"Origin": "http://localhost:3000"})
    assert response.status_code == 200
    cors_headers = [h for h in response.headers.keys() if h.startswith("access-control")]
    assert len(cors_headers) > 0


def test_configuration_loaded():
    """Test that configuration is loaded properly."""
    assert settings.API_PREFIX == "/api"
    assert settings.DEFAULT_PERIOD == "24h"
    assert "http://localhost:3000" in settings.BACKEND_CORS_ORIGINS
    assert "Kameme FM" in settings.TRACKED_NODES


def test_settings_parse_comma_separated_lists():
    """Test list settings given as comma-separated strings."""
    custom = Settings(TRACKED_NODES="Aviation FM, Emoo FM,", BACKEND_CORS_ORIGINS="")
    assert custom.TRACKED_NODES == ["Aviation FM", "Emoo FM"]
    assert custom.BACKEND_CORS_ORIGINS == []


def test_sqlite_url_from_db_name(monkeypatch):
    """Test the database URL assembled from DB_NAME."""
    monkeypatch.delenv("DATABASE_URL", raising=False)
    custom = Settings(DB_NAME="telemetry_test.db", SQLALCHEMY_DATABASE_URI=None)
    assert custom.SQLALCHEMY_DATABASE_URI == "sqlite+aiosqlite:///telemetry_test.db"


def test_database_url_env_is_converted(monkeypatch):
    """Test DATABASE_URL in postgres:// form."""
    monkeypatch.setenv("DATABASE_URL", "postgres://user:pw@db:5432/telemetry")
    custom = Settings(SQLALCHEMY_DATABASE_URI=None)
    assert custom.SQLALCHEMY_DATABASE_URI == "postgresql+asyncpg://user:pw@db:5432/telemetry"


def test_setup_logging_writes_log_files(tmp_path):
    """Test that errors reach both rotating log files."""
    root = setup_logging(log_dir=str(tmp_path), level="INFO")
    try:
        get_logger("horizon_api.tests").error("antenna feed check failed")
        for handler in root.handlers:
            handler.flush()
        assert "antenna feed check failed" in (tmp_path / "horizon_api.log").read_text(encoding="utf-8")
        assert "antenna feed check failed" in (tmp_path / "horizon_api_errors.log").read_text(encoding="utf-8")
    finally:
        for handler in root.handlers:
            handler.close()
        setup_logging()
