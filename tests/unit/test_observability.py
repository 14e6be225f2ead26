import pytest
from unittest.mock import patch

from bulletin.core import observability
from bulletin.core.observability import (
    MetricsCollector, init_observability, HealthMonitor, trace_operation, monitor_performance
)


@patch("bulletin.core.observability.setup_logging")
@patch("bulletin.core.observability.setup_tracing")
def test_init_observability(mock_tracing, mock_logging):
    """Test initialization."""
    init_observability()
    mock_logging.assert_called_once()
    mock_tracing.assert_called_once()


def test_metrics_collector():
    """Test that tracked values show up in the exposition output."""
    MetricsCollector.track_created(True)
    MetricsCollector.track_query("byRecipient")
    MetricsCollector.track_streamed("byRecipient")
    MetricsCollector.track_api_request("GET", "/messages", 200, 0.1)
    MetricsCollector.track_cache_operation("get", True)
    MetricsCollector.track_store_error("find_page")
    MetricsCollector.track_rate_limit("127.0.0.1", "/messages")

    output = MetricsCollector.get_metrics().decode()

    assert 'messages_created_total{urgent="true"}' in output
    assert 'message_queries_total{mode="byRecipient"}' in output
    assert 'messages_streamed_total{mode="byRecipient"}' in output
    assert 'store_errors_total{operation="find_page"}' in output
    assert "http_request_duration_seconds" in output


@pytest.mark.asyncio
async def test_health_monitor():
    """Test health monitor."""
    monitor = HealthMonitor()

    def sync_check():
        return True

    async def async_check():
        return True

    def fail_check():
        return False

    def broken_check():
        raise RuntimeError("boom")

    monitor.register_check("sync", sync_check)
    monitor.register_check("async", async_check)

    result = await monitor.check_health()
    assert result["status"] == "healthy"
    assert result["checks"]["sync"]["status"] == "healthy"
    assert result["checks"]["async"]["status"] == "healthy"

    monitor.register_check("fail", fail_check)
    result = await monitor.check_health()
    assert result["status"] == "unhealthy"

    monitor.register_check("broken", broken_check)
    result = await monitor.check_health()
    assert result["checks"]["broken"]["error"] == "boom"


@pytest.mark.asyncio
async def test_trace_operation_without_tracer():
    with patch.object(observability, "tracer", None):
        @trace_operation("sync_op")
        def sync_op(x):
            return x + 1

        @trace_operation("async_op")
        async def async_op(x):
            return x * 2

        assert sync_op(1) == 2
        assert await async_op(3) == 6


@pytest.mark.asyncio
async def test_monitor_performance_reraises():
    @monitor_performance("failing_op")
    async def failing_op():
        raise ValueError("bad")

    with pytest.raises(ValueError, match="bad"):
        await failing_op()
