"""
End-to-end tests through the ASGI application.

The upstream is either a StubFetcher or the real UpstreamFetcher with
aiohttp requests intercepted by aioresponses.
"""

import asyncio
import json

import pytest
from aioresponses import aioresponses
from fastapi.testclient import TestClient

from tinymonitor.web import GatewayHandler, create_app

from tests.helpers.pages import METER_VALUES, UPSTREAM_URL, StubFetcher, build_status_page


def _client(config, fetcher) -> TestClient:
    return TestClient(create_app(config, GatewayHandler(config, fetcher=fetcher)))


@pytest.mark.integration
class TestGatewayApp:
    def test_reading_served_on_any_path(self, config):
        page = build_status_page({label: "233.4" for label in METER_VALUES}, state="ON")
        fetcher = StubFetcher(body=page.encode())

        with _client(config, fetcher) as client:
            for path in ("/", "/anything", "/docs", "/a/b?c=d"):
                response = client.get(path)

                assert response.status_code == 200
                assert response.headers["content-type"] == "application/json"
                assert response.headers["connection"] == "close"
                assert response.headers["cache-control"] == "no-store"
                assert response.headers["x-request-id"]
                assert '"voltage":233.400' in response.text
                assert '"state":"ON"' in response.text

        assert fetcher.calls == 4

    def test_body_field_order(self, config, stub_fetcher):
        with _client(config, stub_fetcher) as client:
            response = client.get("/")

        assert list(json.loads(response.text)) == [
            "name",
            "voltage",
            "current",
            "active_power",
            "apparent_power",
            "reactive_power",
            "power_factor",
            "energy_today_kwh",
            "energy_yesterday_kwh",
            "energy_total_kwh",
            "state",
            "source",
        ]

    def test_upstream_timeout_is_bad_gateway(self, config):
        handler = GatewayHandler(config)

        with aioresponses() as mocked:
            mocked.get(UPSTREAM_URL, exception=asyncio.TimeoutError())
            with TestClient(create_app(config, handler)) as client:
                response = client.get("/")

        assert response.status_code == 502
        assert response.text == '{"error":"bad gateway","detail":"fetch failed"}'

    def test_upstream_page_through_real_fetcher(self, config, status_page):
        handler = GatewayHandler(config)

        with aioresponses() as mocked:
            mocked.get(UPSTREAM_URL, status=200, body=status_page)
            with TestClient(create_app(config, handler)) as client:
                response = client.get("/")

        assert response.status_code == 200
        assert json.loads(response.text)["energy_total_kwh"] == 112.406

    def test_missing_field_is_parse_failure(self, config):
        fetcher = StubFetcher(body=build_status_page(omit=["Power Factor"]).encode())

        with _client(config, fetcher) as client:
            response = client.get("/")

        assert response.status_code == 500
        assert response.text == '{"error":"parse failure"}'

    def test_non_numeric_value_is_parse_failure(self, config):
        fetcher = StubFetcher(body=build_status_page(dict(METER_VALUES, Voltage="N/A")).encode())

        with _client(config, fetcher) as client:
            response = client.get("/")

        assert response.status_code == 500
        assert response.text == '{"error":"parse failure"}'

    @pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "PATCH", "OPTIONS"])
    def test_non_get_rejected_without_fetch(self, config, stub_fetcher, method):
        with _client(config, stub_fetcher) as client:
            response = client.request(method, "/")

        assert response.status_code == 405
        assert response.text == '{"error":"method not allowed"}'
        assert response.headers["connection"] == "close"
        assert stub_fetcher.calls == 0

    def test_unrouted_method_gets_same_rejection(self, config, stub_fetcher):
        with _client(config, stub_fetcher) as client:
            response = client.request("BREW", "/")

        assert response.status_code == 405
        assert response.text == '{"error":"method not allowed"}'
        assert stub_fetcher.calls == 0

    def test_fetch_failure_reply_has_no_internals(self, config, failing_fetcher):
        with _client(config, failing_fetcher) as client:
            response = client.get("/")

        assert response.status_code == 502
        assert "meter.test" not in response.text
