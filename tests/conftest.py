"""
Shared fixtures.

The service reads its configuration at import time, so the environment is
pointed at an in-memory SQLite database and a throwaway uploads directory
before anything from storefront is imported.
"""
import os
import shutil
import tempfile

UPLOADS_ROOT = tempfile.mkdtemp(prefix="storefront-uploads-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["UPLOADS_DIR"] = UPLOADS_ROOT

import pytest
from fastapi.testclient import TestClient

from storefront.data.database import Base, SessionLocal, engine
from storefront.main import app
from storefront.services.file_storage import FileStorage


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    shutil.rmtree(os.path.join(UPLOADS_ROOT, "products"), ignore_errors=True)


@pytest.fixture
def test_client():
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def storage():
    return FileStorage(UPLOADS_ROOT)


@pytest.fixture
def uploads_root():
    return UPLOADS_ROOT


@pytest.fixture
def create_product(test_client):
    """Factory creating a product through the API and returning its JSON."""

    def _create(sku="TEST-001", price=99.99, name="Test Product", description="This is a test product"):
        response = test_client.post(
            "/api/products",
            json={"name": name, "description": description, "price": price, "sku": sku},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create
