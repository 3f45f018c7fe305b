import pytest
from contextlib import asynccontextmanager
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4
from datetime import datetime, timezone

from takeoff.api.main import create_app
from takeoff.api.deps import get_session_factory, get_snapshot_service
from takeoff.core.exceptions import ProjectNotFoundError
from takeoff.models.project import (
    ProjectFileResponse,
    ProjectResponse,
    ProjectSnapshotResponse,
)

@pytest.fixture
def client():
    app = create_app()
    return TestClient(app)

@pytest.fixture
def mock_snapshot_service():
    return AsyncMock()

def make_snapshot(project_id):
    now = datetime.now(timezone.utc)
    return ProjectSnapshotResponse(
        project=ProjectResponse(id=project_id, name="Tower A", status="analyzing", created_at=now, updated_at=now),
        files=[
            ProjectFileResponse(
                id=uuid4(),
                original_name="boq.xlsx",
                file_type="boq",
                status="failed",
                sheet_status=[
                    {
                        "sheet_name": "Bill 1",
                        "status": "failed",
                        "parts": [
                            {"index": 0, "status": "ready"},
                            {"index": 1, "status": "failed", "error": "timeout"},
                        ],
                    }
                ],
                updated_at=now,
            )
        ],
        items=[],
        logs=[],
        fingerprint="abc",
    )

def test_get_snapshot(client, mock_snapshot_service):
    project_id = uuid4()
    mock_snapshot_service.snapshot.return_value = make_snapshot(project_id)

    client.app.dependency_overrides[get_snapshot_service] = lambda: mock_snapshot_service

    response = client.get(f"/api/v1/projects/{project_id}/snapshot")

    assert response.status_code == 200
    data = response.json()
    assert data["project"]["status"] == "analyzing"
    assert data["files"][0]["sheet_status"][0]["parts"][1]["error"] == "timeout"
    mock_snapshot_service.snapshot.assert_called_once_with(project_id)

def test_get_snapshot_not_found(client, mock_snapshot_service):
    project_id = uuid4()
    mock_snapshot_service.snapshot.side_effect = ProjectNotFoundError(project_id)

    client.app.dependency_overrides[get_snapshot_service] = lambda: mock_snapshot_service

    response = client.get(f"/api/v1/projects/{project_id}/snapshot")

    assert response.status_code == 404

def test_stream_unknown_project(client):
    @asynccontextmanager
    async def fake_session():
        yield AsyncMock()

    client.app.dependency_overrides[get_session_factory] = lambda: fake_session

    with patch("takeoff.api.routers.projects.ProjectSnapshotService") as mock_service_cls:
        service = MagicMock()
        service.snapshot = AsyncMock(side_effect=ProjectNotFoundError("p"))
        mock_service_cls.return_value = service
        response = client.get(f"/api/v1/projects/{uuid4()}/stream")

    assert response.status_code == 404
