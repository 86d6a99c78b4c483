"""Versions discovery, health and cross-cutting HTTP behaviour."""

from __future__ import annotations

HUB_URL = "http://localhost:8080/ocpi/2.3"


class TestVersions:
    def test_lists_supported_versions(self, client):
        response = client.get("/ocpi/versions")

        assert response.status_code == 200
        body = response.get_json()
        assert body["status_code"] == 1000
        assert body["data"] == [{"version": "2.3", "url": HUB_URL}]

    def test_version_details(self, client):
        response = client.get("/ocpi/2.3")

        assert response.status_code == 200
        data = response.get_json()["data"]
        assert data["version"] == "2.3"
        assert data["endpoints"] == [
            {"identifier": "credentials", "role": "SENDER", "url": f"{HUB_URL}/credentials"},
            {"identifier": "credentials", "role": "RECEIVER", "url": f"{HUB_URL}/credentials"},
        ]


class TestHealth:
    def test_reports_ok(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.get_json() == {"status": "ok", "db": "ok", "version": "2.3"}


class TestCrossCutting:
    def test_unknown_route_uses_envelope(self, client):
        response = client.get("/ocpi/2.3/tariffs")

        assert response.status_code == 404
        body = response.get_json()
        assert body["status_code"] == 2001
        assert body["status_message"] == "Route '/ocpi/2.3/tariffs' not found"
        assert body["data"] is None

    def test_method_not_allowed(self, client):
        response = client.patch("/ocpi/2.3/credentials")

        assert response.status_code == 405
        assert response.get_json()["status_code"] == 2001

    def test_request_id_is_echoed(self, client):
        response = client.get("/ocpi/versions", headers={"X-Request-ID": "req-abc"})
        assert response.headers["X-Request-ID"] == "req-abc"

    def test_request_id_is_generated(self, client):
        response = client.get("/ocpi/versions")
        assert response.headers["X-Request-ID"]
