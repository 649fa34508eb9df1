import json

import httpx
import pytest

from city_insights.aggregation.pipeline import AggregationPipeline
from city_insights.backend.client import BackendClient
from city_insights.backend.session import BackendSession
from city_insights.config import Settings
from city_insights.providers.countries import CountriesClient
from city_insights.providers.exchange_rate import ExchangeRateClient
from city_insights.providers.geodb import GeoDBClient
from city_insights.providers.openweather import OpenWeatherClient

PARIS = {
    "city": "Paris",
    "country": "France",
    "countryCode": "FR",
    "region": "Île-de-France",
    "latitude": 48.85,
    "longitude": 2.35,
    "population": 2148000,
    "timezone": "Europe/Paris",
}
FRANCE = [
    {
        "name": {"common": "France", "official": "French Republic"},
        "currencies": {"EUR": {"name": "Euro", "symbol": "€"}},
    }
]
PARIS_WEATHER = {
    "weather": [{"id": 800, "main": "Clear", "description": "clear sky"}],
    "main": {"temp": 18.3, "feels_like": 17.9, "humidity": 55},
    "cod": 200,
}
EUR_TO_USD = {"success": True, "query": {"from": "EUR", "to": "USD"}, "result": 1.08}

SERVICES = {
    "wft-geo-db.p.rapidapi.com": "geo",
    "restcountries.com": "country",
    "api.openweathermap.org": "weather",
    "api.exchangerate.host": "exchange",
}


class FakeUpstream:
    """Serve canned third-party responses and record which services were hit.

    A response may be a JSON-able value, an ``httpx.Response`` or an
    exception instance to raise from the transport.
    """

    def __init__(self):
        self.responses = {
            "geo": {"data": [PARIS]},
            "country": FRANCE,
            "weather": PARIS_WEATHER,
            "exchange": EUR_TO_USD,
        }
        self.calls = []
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        service = SERVICES[request.url.host]
        self.calls.append(service)
        self.requests.append(request)
        response = self.responses[service]
        if isinstance(response, Exception):
            raise response
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, json=response)


class FakeBackend:
    """In-memory stand-in for the persistence backend."""

    def __init__(self, api_key="backend-key"):
        self.api_key = api_key
        self.issue_tokens = True
        self.saved = []
        self.auth_requests = 0
        self.requests = []
        self.statistics = {
            "overview": {
                "totalSearches": 3,
                "uniqueCities": 2,
                "avgTemperature": 17.5,
                "uniqueCountries": 2,
            },
            "popularCities": [{"_id": "Paris", "count": 2}, {"_id": "Oslo", "count": 1}],
        }

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api")
        if path == "/auth/token":
            self.auth_requests += 1
            body = json.loads(request.content)
            if self.issue_tokens and body.get("apiKey") == self.api_key:
                return httpx.Response(200, json={"success": True, "token": "tok-1"})
            return httpx.Response(
                401, json={"success": False, "message": "Invalid API key"}
            )

        if request.headers.get("authorization") != "Bearer tok-1":
            return httpx.Response(401, json={"success": False, "message": "No token"})
        if path == "/saveData":
            record = json.loads(request.content)
            record["_id"] = f"rec-{len(self.saved) + 1}"
            record["timestamp"] = "2024-05-01T12:00:00Z"
            self.saved.append(record)
            return httpx.Response(
                201, json={"success": True, "data": {"id": record["_id"]}}
            )
        if path == "/stats":
            return httpx.Response(200, json={"success": True, "data": self.statistics})
        if path == "/records":
            limit = int(request.url.params["limit"])
            newest = list(reversed(self.saved))[:limit]
            return httpx.Response(200, json={"success": True, "data": newest})
        return httpx.Response(404, json={"success": False, "message": "Not found"})


@pytest.fixture
def settings():
    return Settings(
        geodb_api_key="geo-key",
        openweather_api_key="weather-key",
        exchange_api_key="exchange-key",
        backend_url="http://localhost:5000/api",
        backend_api_key="backend-key",
    )


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
async def upstream_client(upstream):
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler)) as client:
        yield client


@pytest.fixture
async def backend_http(backend):
    async with httpx.AsyncClient(transport=httpx.MockTransport(backend.handler)) as client:
        yield client


@pytest.fixture
def geo(upstream_client, settings):
    return GeoDBClient(
        upstream_client,
        url=settings.geodb_url,
        host=settings.geodb_host,
        api_key=settings.geodb_api_key,
    )


@pytest.fixture
def pipeline(upstream_client, settings, geo):
    return AggregationPipeline(
        geo=geo,
        countries=CountriesClient(upstream_client, url=settings.countries_url),
        weather=OpenWeatherClient(
            upstream_client,
            url=settings.openweather_url,
            api_key=settings.openweather_api_key,
        ),
        exchange=ExchangeRateClient(
            upstream_client,
            url=settings.exchange_url,
            api_key=settings.exchange_api_key,
        ),
    )


@pytest.fixture
def session(backend_http, settings):
    return BackendSession(
        backend_http, base_url=settings.backend_url, api_key=settings.backend_api_key
    )


@pytest.fixture
def backend_client(session):
    return BackendClient(session)
