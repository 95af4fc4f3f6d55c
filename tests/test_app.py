import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from datastore.sql_store import TemperatureStore
from services.aggregator import Aggregator
from services.temperatures import TemperatureService
from settings import get_settings


def _noop() -> None:
    return None


def _install_store(monkeypatch, store: TemperatureStore) -> TemperatureService:
    service = TemperatureService(store=store, aggregator=Aggregator(), recent_limit=100)

    def build_test_store(url=None) -> TemperatureStore:
        return store

    def build_test_service() -> TemperatureService:
        return service

    build_test_store.cache_clear = _noop  # type: ignore[attr-defined]
    build_test_service.cache_clear = _noop  # type: ignore[attr-defined]

    monkeypatch.setattr("app.main.build_default_store", build_test_store)
    monkeypatch.setattr("app.main.build_default_service", build_test_service)
    monkeypatch.setattr("app.api.build_default_service", build_test_service)
    return service


@pytest.fixture
def store() -> TemperatureStore:
    return TemperatureStore("sqlite://")


@pytest.fixture
def api_client(store, monkeypatch) -> Iterator[TestClient]:
    monkeypatch.setenv("TEMPS_BACKFILL_ON_STARTUP", "false")
    get_settings.cache_clear()
    _install_store(monkeypatch, store)

    app = create_app()
    with TestClient(app) as client:
        yield client

    get_settings.cache_clear()


def test_lifespan_opens_backfills_and_closes_store(store, monkeypatch) -> None:
    monkeypatch.setenv("TEMPS_BACKFILL_ON_STARTUP", "true")
    get_settings.cache_clear()
    _install_store(monkeypatch, store)

    yesterday = date.today() - timedelta(days=1)
    try:
        with TestClient(create_app()) as client:
            assert store.is_open is True
            response = client.get(f"/api/stats/{yesterday.isoformat()}")
            assert response.status_code == 200
            assert response.json()["count"] == 1440
    finally:
        get_settings.cache_clear()

    assert store.is_open is False


def test_stats_for_example_day(api_client: TestClient, store: TemperatureStore) -> None:
    store.add_sample(50.0, timestamp=datetime(2024, 1, 1, 0, 0))
    store.add_sample(52.0, timestamp=datetime(2024, 1, 1, 12, 0))

    response = api_client.get("/api/stats/2024-01-01")

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"date", "count", "average", "min", "max", "firstRecord", "lastRecord"}
    assert body["date"] == "2024-01-01"
    assert body["count"] == 2
    assert body["average"] == 51.0
    assert body["min"] == 50.0
    assert body["max"] == 52.0
    assert body["firstRecord"]["timestamp"] == "2024-01-01T00:00:00"
    assert body["lastRecord"]["value"] == 52.0


def test_stats_for_empty_day_returns_not_found(api_client: TestClient) -> None:
    response = api_client.get("/api/stats/2024-01-01")

    assert response.status_code == 404
    assert "2024-01-01" in response.json()["detail"]


def test_stats_with_invalid_date_returns_bad_request(api_client: TestClient) -> None:
    response = api_client.get("/api/stats/2024-13-45")

    assert response.status_code == 400


def test_list_day_returns_ascending_samples(api_client: TestClient, store: TemperatureStore) -> None:
    store.add_sample(44.0, timestamp=datetime(2024, 1, 1, 18, 0))
    store.add_sample(43.0, timestamp=datetime(2024, 1, 1, 6, 0))
    store.add_sample(99.0, timestamp=datetime(2024, 1, 2, 6, 0))

    response = api_client.get("/api/temperatures/2024-01-01")

    assert response.status_code == 200
    body = response.json()
    assert body["date"] == "2024-01-01"
    assert body["count"] == 2
    assert [sample["value"] for sample in body["data"]] == [43.0, 44.0]
    assert set(body["data"][0]) == {"id", "value", "timestamp"}


def test_recent_listing_honours_limit(api_client: TestClient, store: TemperatureStore) -> None:
    start = datetime(2024, 1, 1, 10, 0)
    store.bulk_insert((start + timedelta(minutes=m), 50.0 + m) for m in range(10))

    response = api_client.get("/api/temperatures", params={"limit": 5})

    assert response.status_code == 200
    assert [sample["value"] for sample in response.json()] == [55.0, 56.0, 57.0, 58.0, 59.0]


def test_recent_listing_defaults_to_all_when_fewer_than_limit(
    api_client: TestClient, store: TemperatureStore
) -> None:
    start = datetime(2024, 1, 1, 10, 0)
    store.bulk_insert((start + timedelta(minutes=m), 50.0) for m in range(3))

    response = api_client.get("/api/temperatures")

    assert response.status_code == 200
    assert len(response.json()) == 3


def test_recent_listing_rejects_zero_limit(api_client: TestClient) -> None:
    response = api_client.get("/api/temperatures", params={"limit": 0})

    assert response.status_code == 400


def test_create_sample_returns_created(api_client: TestClient) -> None:
    response = api_client.post("/api/temperatures", json={"value": 61.2})

    assert response.status_code == 201
    body = response.json()
    assert body["value"] == 61.2
    assert isinstance(body["id"], int)
    assert body["timestamp"]


def test_create_sample_without_value_returns_bad_request(api_client: TestClient) -> None:
    response = api_client.post("/api/temperatures", json={})

    assert response.status_code == 400
    assert response.json()["detail"] == "Temperature value is required."


def test_create_sample_with_non_numeric_value_returns_bad_request(api_client: TestClient) -> None:
    response = api_client.post("/api/temperatures", json={"value": "warm"})

    assert response.status_code == 400


@pytest.mark.parametrize(
    "raw_body",
    [
        '{"value": "NaN"}',
        '{"value": "Infinity"}',
        '{"value": NaN}',
        '{"value": Infinity}',
        '{"value": -Infinity}',
        '{"value": true}',
        '{"value": "61.2"}',
    ],
)
def test_create_sample_rejects_non_finite_and_non_number_values(
    api_client: TestClient, store: TemperatureStore, raw_body: str
) -> None:
    response = api_client.post(
        "/api/temperatures",
        content=raw_body,
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert store.fetch_latest(10) == []


def test_create_sample_accepts_integer_value(api_client: TestClient) -> None:
    response = api_client.post("/api/temperatures", json={"value": 50})

    assert response.status_code == 201
    assert response.json()["value"] == 50.0


def test_store_queries_run_concurrently(
    api_client: TestClient, store: TemperatureStore, monkeypatch
) -> None:
    barrier = threading.Barrier(2)
    fetch_latest = store.fetch_latest

    def coordinated_fetch_latest(limit: int):
        try:
            barrier.wait(timeout=2.0)
        except threading.BrokenBarrierError as exc:
            raise AssertionError("Store queries did not run concurrently") from exc
        return fetch_latest(limit)

    monkeypatch.setattr(store, "fetch_latest", coordinated_fetch_latest)

    with ThreadPoolExecutor(max_workers=2) as pool:
        futures = [pool.submit(api_client.get, "/api/temperatures") for _ in range(2)]
        responses = [future.result(timeout=10) for future in futures]

    assert [response.status_code for response in responses] == [200, 200]


def test_store_failure_returns_generic_server_error(
    api_client: TestClient, store: TemperatureStore
) -> None:
    store.close()

    response = api_client.get("/api/temperatures")

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error."}


def test_hello_endpoints(api_client: TestClient) -> None:
    greeting = api_client.get("/api/data")
    echoed = api_client.post("/api/data", json={"name": "sensor", "n": 1})

    assert greeting.status_code == 200
    assert greeting.json()["message"] == "Hello from FastAPI!"
    assert greeting.json()["timestamp"]
    assert echoed.status_code == 200
    assert echoed.json() == {"status": "Data received!", "received": {"name": "sensor", "n": 1}}


def test_health(api_client: TestClient) -> None:
    response = api_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
