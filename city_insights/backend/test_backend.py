import fakeredis
import httpx
import pytest

from city_insights.backend.client import BackendClient
from city_insights.backend.session import BackendSession
from city_insights.errors import AuthenticationError
from city_insights.models.city import City
from city_insights.models.country import Country
from city_insights.models.exchange import ExchangeRate
from city_insights.models.record import AggregatedCityRecord
from city_insights.models.weather import WeatherSnapshot
from city_insights.redis_store.store import TokenStore


@pytest.fixture
def record():
    return AggregatedCityRecord.build(
        City(
            name="Oslo",
            country_code="NO",
            latitude=59.91,
            longitude=10.75,
            population=709037,
            timezone="Europe/Oslo",
        ),
        Country.from_api_response(
            "NO",
            [{"name": {"common": "Norway"}, "currencies": {"NOK": {"name": "Norwegian krone"}}}],
        ),
        WeatherSnapshot(
            main="Snow", description="light snow", temperature=-3.5, feels_like=-8.2, humidity=86
        ),
        ExchangeRate.unavailable("NOK"),
    )


@pytest.mark.asyncio
async def test_with_token_authenticates_once(session, backend):
    assert session.token is None
    assert await session.with_token() == "tok-1"
    assert await session.with_token() == "tok-1"
    assert backend.auth_requests == 1


@pytest.mark.asyncio
async def test_refresh_failure_keeps_no_token(session, backend):
    backend.issue_tokens = False
    with pytest.raises(AuthenticationError):
        await session.refresh()
    assert session.token is None


@pytest.mark.asyncio
async def test_refresh_transport_failure():
    def handler(request):
        raise httpx.ConnectError("refused")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        session = BackendSession(client, base_url="http://localhost:5000/api", api_key="k")
        with pytest.raises(AuthenticationError):
            await session.refresh()


@pytest.mark.asyncio
async def test_session_persists_and_reloads_token(backend_http, backend):
    store = TokenStore(fakeredis.FakeAsyncRedis(decode_responses=True))
    first = BackendSession(
        backend_http, base_url="http://localhost:5000/api", api_key="backend-key", token_store=store
    )
    await first.with_token()
    second = BackendSession(
        backend_http, base_url="http://localhost:5000/api", api_key="backend-key", token_store=store
    )
    assert await second.with_token() == "tok-1"
    assert backend.auth_requests == 1


@pytest.mark.asyncio
async def test_save_sends_both_credentials(backend_client, backend, record):
    assert await backend_client.save(record) is True
    request = backend.requests[-1]
    assert request.url.path == "/api/saveData"
    assert request.headers["Authorization"] == "Bearer tok-1"
    assert request.headers["X-API-Key"] == "backend-key"
    saved = backend.saved[0]
    assert saved["population"] == 709037
    assert saved["currency"] == {"code": "NOK", "name": "Norwegian krone", "rateToUSD": 0}
    assert saved["weather"]["temperature"] == -3
    assert saved["weather"]["feelsLike"] == -8
    assert saved["coordinates"] == {"latitude": 59.91, "longitude": 10.75}


@pytest.mark.asyncio
async def test_save_twice_creates_two_entries(backend_client, backend, record):
    # Saves carry no idempotency key, so a repeated save is a new entry.
    assert await backend_client.save(record)
    assert await backend_client.save(record)
    assert len(backend.saved) == 2
    assert backend.saved[0]["_id"] != backend.saved[1]["_id"]


@pytest.mark.asyncio
async def test_save_without_token_reports_failure(backend_client, backend, record):
    backend.issue_tokens = False
    assert await backend_client.save(record) is False
    assert backend.saved == []
    assert all(r.url.path == "/api/auth/token" for r in backend.requests)


@pytest.mark.asyncio
async def test_auth_is_retried_lazily_after_failure(backend_client, backend, record):
    backend.issue_tokens = False
    assert await backend_client.save(record) is False
    backend.issue_tokens = True
    assert await backend_client.save(record) is True
    assert backend.auth_requests == 2


@pytest.mark.asyncio
async def test_save_application_failure(record):
    def handler(request):
        if request.url.path.endswith("/auth/token"):
            return httpx.Response(200, json={"success": True, "token": "t"})
        return httpx.Response(400, json={"success": False, "message": "Invalid payload"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        session = BackendSession(client, base_url="http://localhost:5000/api", api_key="k")
        assert await BackendClient(session).save(record) is False


@pytest.mark.asyncio
async def test_save_network_failure(record):
    def handler(request):
        if request.url.path.endswith("/auth/token"):
            return httpx.Response(200, json={"success": True, "token": "t"})
        raise httpx.ConnectError("refused")

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        session = BackendSession(client, base_url="http://localhost:5000/api", api_key="k")
        assert await BackendClient(session).save(record) is False


@pytest.mark.asyncio
async def test_fetch_statistics(backend_client):
    stats = await backend_client.fetch_statistics()
    assert stats.overview.total_searches == 3
    assert stats.overview.avg_temperature == 17.5
    assert [city.name for city in stats.popular_cities] == ["Paris", "Oslo"]


@pytest.mark.asyncio
async def test_fetch_statistics_degrades_to_none(backend_client, backend):
    backend.issue_tokens = False
    assert await backend_client.fetch_statistics() is None


@pytest.mark.asyncio
async def test_fetch_records_most_recent_first(backend_client, backend, record):
    await backend_client.save(record)
    await backend_client.save(record)
    records = await backend_client.fetch_records(page=1, limit=5)
    params = backend.requests[-1].url.params
    assert params["sortBy"] == "timestamp"
    assert params["order"] == "desc"
    assert [r.id for r in records] == ["rec-2", "rec-1"]
    assert records[0].city == "Oslo"


@pytest.mark.asyncio
async def test_fetch_records_degrades_to_empty(backend_client, backend):
    backend.issue_tokens = False
    assert await backend_client.fetch_records() == []
