import pytest
from fastapi.testclient import TestClient
from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4
from datetime import datetime, timezone

from takeoff.api.main import create_app
from takeoff.api.deps import get_job_service
from takeoff.core.exceptions import JobNotFoundError, ProjectNotFoundError

def make_job(**overrides):
    now = datetime.now(timezone.utc)
    fields = {
        "id": uuid4(),
        "project_id": uuid4(),
        "file_id": uuid4(),
        "idempotency_key": "key-1",
        "status": "queued",
        "stage": "queued",
        "message": "Queued",
        "error": None,
        "started_at": None,
        "finished_at": None,
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)

@pytest.fixture
def client():
    app = create_app()
    return TestClient(app)

@pytest.fixture
def mock_job_service():
    return AsyncMock()

def test_get_job_status(client, mock_job_service):
    job = make_job(
        status="failed",
        stage="finalizing",
        message="Failed",
        error={"message": "Schedule dependency not satisfied: No schedule items extracted yet", "kind": "dependency"},
    )
    mock_job_service.get_job.return_value = job

    client.app.dependency_overrides[get_job_service] = lambda: mock_job_service

    response = client.get(f"/api/v1/jobs/{job.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "failed"
    assert data["error"]["kind"] == "dependency"
    mock_job_service.get_job.assert_called_once_with(job.id)

def test_get_job_not_found(client, mock_job_service):
    job_id = uuid4()
    mock_job_service.get_job.side_effect = JobNotFoundError(job_id)

    client.app.dependency_overrides[get_job_service] = lambda: mock_job_service

    response = client.get(f"/api/v1/jobs/{job_id}")

    assert response.status_code == 404
    assert "not found" in response.json()["detail"].lower()

def test_list_project_jobs(client, mock_job_service):
    project_id = uuid4()
    mock_job_service.list_jobs.return_value = [
        make_job(project_id=project_id, status="done", stage="finalizing", message="Completed"),
        make_job(project_id=project_id),
    ]

    client.app.dependency_overrides[get_job_service] = lambda: mock_job_service

    response = client.get(f"/api/v1/projects/{project_id}/jobs")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert [job["status"] for job in data["jobs"]] == ["done", "queued"]

def test_list_jobs_unknown_project(client, mock_job_service):
    project_id = uuid4()
    mock_job_service.list_jobs.side_effect = ProjectNotFoundError(project_id)

    client.app.dependency_overrides[get_job_service] = lambda: mock_job_service

    response = client.get(f"/api/v1/projects/{project_id}/jobs")

    assert response.status_code == 404
