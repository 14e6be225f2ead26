from unittest.mock import AsyncMock, patch


def test_health_check_endpoint(client):
    """Test /health endpoint with the database check registered at startup."""
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["checks"]["database"]["status"] == "healthy"


def test_health_check_reports_failure(client):
    with patch("bulletin.api.v1.health.health_monitor.check_health", new_callable=AsyncMock) as mock_check:
        mock_check.side_effect = RuntimeError("monitor broken")
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "unhealthy"
    assert response.json()["checks"]["error"]["error"] == "monitor broken"


def test_readiness_check(client):
    """Test /ready endpoint."""
    with patch("bulletin.api.v1.health.db_manager.health_check", new_callable=AsyncMock) as mock_db, \
         patch("bulletin.api.v1.health.redis_manager.health_check", new_callable=AsyncMock) as mock_redis:
        mock_db.return_value = True
        mock_redis.return_value = False

        response = client.get("/ready")

    assert response.status_code == 200
    assert response.json()["ready"] is True
    assert response.json()["checks"]["redis"]["status"] == "degraded"


def test_readiness_check_database_down(client):
    with patch("bulletin.api.v1.health.db_manager.health_check", new_callable=AsyncMock) as mock_db, \
         patch("bulletin.api.v1.health.redis_manager.health_check", new_callable=AsyncMock) as mock_redis:
        mock_db.return_value = False
        mock_redis.return_value = True

        response = client.get("/ready")

    assert response.status_code == 503
    assert response.json()["ready"] is False


def test_liveness_check(client):
    """Test /live endpoint."""
    response = client.get("/live")
    assert response.status_code == 200
    assert response.json()["status"] == "alive"
