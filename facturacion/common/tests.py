"""
Tests de la capa HTTP común: middleware y sobre de errores
"""


class TestAppSurface:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "environment": "test"}

    def test_security_headers(self, client):
        response = client.get("/")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get("/no-existe")
        assert response.status_code == 404
        assert response.json() == {"error": "Not Found"}

    def test_malformed_body_is_400(self, client):
        response = client.post(
            "/clientes",
            content="{no es json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert "error" in response.json()
