import os

# Pas de Redis en tests: le limiter n'est pas initialisé au démarrage de l'app
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "test_key_secret")

import pytest
from typing import Generator, Dict, Any
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from roomezes.app import app as fastapi_app
from roomezes.utils.security import require_user, require_vendor

TEST_SECRET = "test_key_secret"

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture
def fake_user() -> Dict[str, Any]:
    return {
        "id": "test-user",
        "email": "test@example.com",
        "role": "student",
        "metadata": {"full_name": "Test User"},
        "token": "fake-token",
    }

# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_require_user(app, fake_user):
    app.dependency_overrides[require_user] = lambda: fake_user
    try:
        yield
    finally:
        app.dependency_overrides.pop(require_user, None)

@pytest.fixture
def vendor_client(app, client):
    app.dependency_overrides[require_vendor] = lambda: {"id": "vendor-user", "role": "vendor", "email": "vendor@example.com"}
    yield client
    app.dependency_overrides.pop(require_vendor, None)

@pytest.fixture(autouse=True)
def _razorpay_secret(monkeypatch):
    monkeypatch.setattr("roomezes.config.RAZORPAY_KEY_ID", "rzp_test_key", raising=False)
    monkeypatch.setattr("roomezes.config.RAZORPAY_KEY_SECRET", TEST_SECRET, raising=False)

# Aucun test ne parle à Supabase
@pytest.fixture(scope="function", autouse=True)
def mock_db_dependency(monkeypatch):
    monkeypatch.setattr("roomezes.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("roomezes.infra.supabase_client.get_service_supabase", lambda: MagicMock())
