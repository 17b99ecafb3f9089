# backend/tests/routes/test_health_routes.py
"""
Tests for the health check and metrics endpoints.
"""

from tutorbook import __version__


class TestHealthRoutes:
    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "tutorbook-api"
        assert data["version"] == __version__
        assert data["timestamp"].endswith("Z")

    def test_prometheus_metrics(self, client):
        client.get("/health")
        response = client.get("/metrics/prometheus")

        assert response.status_code == 200
        assert "tutorbook_service_operations_total" in response.text
