from jobrelay.v1.infra.jobs.schemas import OnboardingPayload


async def test_health_check_success(async_client):
    """Test health check endpoint returns correct format."""
    response = await async_client.get("/v1/healthz")

    assert response.status_code == 200

    data = response.json()
    assert data["ok"] is True

    health_data = data["data"]
    assert health_data["ok"] is True
    assert health_data["version"] == "1.0.0"
    assert health_data["environment"] == "development"
    assert health_data["database"]["connected"] is True


async def test_health_check_response_structure(async_client):
    """Test health check response envelope structure."""
    response = await async_client.get("/v1/healthz")

    data = response.json()

    required_keys = ["ok", "data", "message", "request_id"]
    for key in required_keys:
        assert key in data

    assert "X-Request-ID" in response.headers


async def test_health_check_reports_job_counts(async_client, store, processor):
    done = await store.create(OnboardingPayload(user_id="u1"))
    await store.create(OnboardingPayload(user_id="u2"))
    await processor.process(done.id)

    response = await async_client.get("/v1/healthz")

    queue = response.json()["data"]["queue"]
    assert queue["by_status"] == {
        "queued": 1,
        "processing": 0,
        "completed": 1,
        "failed": 0,
    }
    assert queue["in_flight"] == 1
    assert queue["publishing_configured"] is True
    assert queue["signing_configured"] is True


async def test_health_check_reports_database_down(async_client, services, monkeypatch):
    async def broken_ping():
        raise ConnectionError("database unreachable")

    monkeypatch.setattr(services.database, "ping", broken_ping)

    response = await async_client.get("/v1/healthz")

    health_data = response.json()["data"]
    assert health_data["ok"] is False
    assert health_data["database"]["connected"] is False
    assert health_data["queue"] is None
