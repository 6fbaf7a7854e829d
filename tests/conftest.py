"""Shared test fixtures."""
import os
import tempfile

# Keep rotating log files out of the working tree
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="healthcare-logs-"))

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from healthcare_app.database import bind_models
from healthcare_app.main import app


@pytest.fixture
async def db():
    """Fresh in-memory Mongo per test with every document model bound to it."""
    client = AsyncMongoMockClient()
    database = client.get_database(name="healthcare-test")
    await bind_models(database)
    yield database


@pytest.fixture
async def api(db):
    """HTTP client talking to the FastAPI app in-process."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def appointment_payload():
    return {
        "title": "Annual Checkup",
        "description": "Routine",
        "dateTime": "2024-01-15T10:00:00.000Z",
        "clinic": "c1",
        "clinicName": "City Medical Center",
        "image": "https://x/img.jpg",
        "address": "123 Main St",
        "doctor": "Dr. Johnson",
        "doctorSpecialty": "General Practitioner",
    }
