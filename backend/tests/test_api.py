"""
Tests for the upload validation API.
"""

import io
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from main import app
from services import rule_sets
from services.rule_sets import RuleSet
from services.uploads import upload_service


def png_bytes(width: int, height: int) -> bytes:
    buffer = io.BytesIO()
    Image.new('RGB', (width, height), color='white').save(buffer, format='PNG')
    return buffer.getvalue()


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(upload_service, "temp_dir", tmp_path)
    return TestClient(app)


class TestUploadEndpoints:
    """Test validating submissions over HTTP."""

    def test_valid_avatar(self, client, tmp_path):
        response = client.post(
            "/api/v1/upload/avatar",
            files={"avatar": ("me.png", png_bytes(45, 45), "image/png")},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["valid"] is True
        assert body["errors"] == {}
        assert body["files"][0]["field"] == "avatar"
        assert body["files"][0]["filename"] == "me.png"
        assert body["files"][0]["status"] == "ok"
        # Staged files are removed once the request is done
        assert list(tmp_path.iterdir()) == []

    def test_wrong_dimensions(self, client):
        response = client.post(
            "/api/v1/upload/avatar",
            files={"avatar": ("me.png", png_bytes(50, 45), "image/png")},
        )
        assert response.status_code == 422
        body = response.json()
        assert body["valid"] is False
        assert body["errors"] == {"avatar": ["The image dimensions must be 45 x 45"]}

    def test_wrong_type(self, client):
        response = client.post(
            "/api/v1/upload/avatar",
            files={"avatar": ("me.gif", png_bytes(45, 45), "image/gif")},
        )
        assert response.status_code == 422
        assert response.json()["errors"] == {"avatar": ["Please upload a JPG or PNG image."]}

    def test_not_an_image(self, client):
        response = client.post(
            "/api/v1/upload/avatar",
            files={"avatar": ("me.png", b"plain text", "image/png")},
        )
        assert response.status_code == 422
        assert response.json()["errors"] == {"avatar": ["The image dimensions must be 45 x 45"]}

    def test_optional_banner_can_be_omitted(self, client):
        response = client.post("/api/v1/upload/banner", data={"title": "unchanged"})
        assert response.status_code == 200
        assert response.json()["valid"] is True

    def test_unknown_rule_set(self, client):
        response = client.post(
            "/api/v1/upload/nope",
            files={"avatar": ("me.png", png_bytes(45, 45), "image/png")},
        )
        assert response.status_code == 404

    def test_misconfigured_rule_set(self, client, monkeypatch):
        broken = RuleSet(
            name="broken",
            description="Size rule without an upper bound",
            fields={"avatar": [{"rule": "uploadedFileSize", "in": [1, "mb"]}]},
        )
        monkeypatch.setitem(rule_sets.RULE_SETS, "broken", broken)

        response = client.post(
            "/api/v1/upload/broken",
            files={"avatar": ("me.png", png_bytes(45, 45), "image/png")},
        )
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "CONFIGURATION_ERROR"

    def test_request_id_header(self, client):
        response = client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.status_code == 200
        assert response.headers["X-Request-ID"] == "abc-123"
        assert "X-Process-Time" in response.headers


class TestListingEndpoints:
    """Test the discovery endpoints."""

    def test_rules(self, client):
        response = client.get("/api/v1/upload/rules")
        assert response.status_code == 200
        assert "dimensions" in response.json()

    def test_rule_sets(self, client):
        response = client.get("/api/v1/upload/rule-sets")
        assert response.status_code == 200
        names = [item["name"] for item in response.json()]
        assert names == ["avatar", "banner", "document"]

    def test_health_status(self, client):
        response = client.get("/api/v1/health/status")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
