"""HTTP surface tests against the in-process app (memory backend)."""
import re
from unittest.mock import AsyncMock

from redis.exceptions import ConnectionError as RedisConnectionError

from ephemeral_clip.adapters.redis.stores import RedisBlobStore
from ephemeral_clip.dependencies import get_blob_store
from ephemeral_clip.middleware.shutdown_gate import ShutdownGateMiddleware

HEX32 = re.compile(r"^[0-9a-f]{32}$")


def test_create_fetch_expire_scenario(clocked_client, clock):
    resp = clocked_client.post("/api/create", json={"ciphertext": "AAA=", "iv": "BBB=", "ttl": 60})
    assert resp.status_code == 200
    body = resp.json()
    assert HEX32.match(body["id"])
    assert body["ttl"] == 60

    clock.advance(59)
    resp = clocked_client.get(f"/api/secret/{body['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"ciphertext": "AAA=", "iv": "BBB="}

    clock.advance(1)
    resp = clocked_client.get(f"/api/secret/{body['id']}")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "SECRET_NOT_FOUND"


def test_ttl_is_clamped(client):
    assert client.post("/api/create", json={"ciphertext": "A", "iv": "B", "ttl": 999999}).json()["ttl"] == 86400
    assert client.post("/api/create", json={"ciphertext": "A", "iv": "B", "ttl": 0}).json()["ttl"] == 1
    assert client.post("/api/create", json={"ciphertext": "A", "iv": "B"}).json()["ttl"] == 60


def test_create_missing_fields_is_400(client):
    resp = client.post("/api/create", json={"iv": "BBB="})

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


def test_create_malformed_body_is_400_not_422(client):
    resp = client.post("/api/create", json={"ciphertext": "A", "iv": "B", "ttl": "soon"})

    assert resp.status_code == 400
    assert resp.json()["error"]["details"]["fields"] == ["ttl"]


def test_fetch_malformed_id_is_400_without_store_access(app):
    from fastapi.testclient import TestClient

    store = AsyncMock()
    app.dependency_overrides[get_blob_store] = lambda: store
    with TestClient(app) as c:
        resp = c.get("/api/secret/not-32-hex-chars")
    app.dependency_overrides = {}

    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Invalid secret ID"
    store.fetch.assert_not_called()


def test_delete_then_fetch_and_double_delete(client):
    secret_id = client.post("/api/create", json={"ciphertext": "AAA=", "iv": "BBB="}).json()["id"]

    assert client.delete(f"/api/secret/{secret_id}").status_code == 200
    assert client.get(f"/api/secret/{secret_id}").status_code == 404
    resp = client.delete(f"/api/secret/{secret_id}")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Secret deleted successfully"}


def test_delete_malformed_id_is_400(client):
    assert client.delete("/api/secret/XYZ").status_code == 400


def test_absent_and_deleted_look_identical(client):
    secret_id = client.post("/api/create", json={"ciphertext": "AAA=", "iv": "BBB="}).json()["id"]
    client.delete(f"/api/secret/{secret_id}")

    deleted = client.get(f"/api/secret/{secret_id}")
    never = client.get(f"/api/secret/{'f' * 32}")

    assert deleted.status_code == never.status_code == 404
    assert deleted.json() == never.json()


def test_health_reports_fallback_backend(client):
    body = client.get("/api/health").json()

    assert body["status"] == "ok"
    assert body["backend"] == "fallback"
    assert body["redis"] == "fallback"


def test_health_reports_durable_backend(app):
    from fastapi.testclient import TestClient

    redis_client = AsyncMock()
    redis_client.ping.return_value = True
    app.dependency_overrides[get_blob_store] = lambda: RedisBlobStore(redis_client)
    with TestClient(app) as c:
        body = c.get("/api/health").json()
    app.dependency_overrides = {}

    assert body["backend"] == "durable"
    assert body["redis"] == "connected"


def test_backend_outage_is_retryable_503(app):
    from fastapi.testclient import TestClient

    redis_client = AsyncMock()
    redis_client.get.side_effect = RedisConnectionError("gone")
    app.dependency_overrides[get_blob_store] = lambda: RedisBlobStore(redis_client)
    with TestClient(app) as c:
        resp = c.get(f"/api/secret/{'a' * 32}")
    app.dependency_overrides = {}

    assert resp.status_code == 503
    assert resp.json()["error"]["code"] == "BACKEND_UNAVAILABLE"
    assert resp.headers["Retry-After"] == "1"


def test_liveness(client):
    assert client.get("/health/live").json() == {"status": "ok"}


def test_shutdown_gate_rejects_secret_traffic(client):
    ShutdownGateMiddleware.set_shutting_down(True)
    try:
        assert client.get(f"/api/secret/{'a' * 32}").status_code == 503
        assert client.get("/health/live").status_code == 200
    finally:
        ShutdownGateMiddleware.set_shutting_down(False)
