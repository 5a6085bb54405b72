from __future__ import annotations

import asyncio

import httpx
import pytest

from meteo_chart import ChartConfig, DecodeError, TransportError, fetch_series, load_weather_data
from meteo_chart.fetcher import RawPayload

URL = "https://api.open-meteo.com/v1/forecast?latitude=-37.814&longitude=144.9633&hourly=rain"

PAYLOAD = {
    "hourly": {
        "time": ["2024-01-05T00:00", "2024-01-05T01:00"],
        "temperature_2m": [20.1, 19.8],
        "rain": [0.0, None],
    },
    "hourly_units": {"time": "iso8601", "temperature_2m": "°C", "rain": "mm"},
}


def _fetch(handler, url: str = URL) -> RawPayload:
    async def _run() -> RawPayload:
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_series(url, client=client)

    return asyncio.run(_run())


def test_fetch_series_decodes_payload() -> None:
    payload = _fetch(lambda request: httpx.Response(200, json=PAYLOAD))

    assert payload.timestamps == ["2024-01-05T00:00", "2024-01-05T01:00"]
    assert list(payload.per_parameter) == ["temperature_2m", "rain"]
    assert payload.per_parameter["rain"] == [0.0, None]
    assert payload.units_by_parameter == {"temperature_2m": "°C", "rain": "mm"}


def test_fetch_series_non_success_status_raises_transport_error() -> None:
    with pytest.raises(TransportError) as info:
        _fetch(lambda request: httpx.Response(500, text="upstream down"))

    assert info.value.status == 500
    assert info.value.body == "upstream down"


def test_fetch_series_invalid_json_raises_decode_error() -> None:
    with pytest.raises(DecodeError) as info:
        _fetch(lambda request: httpx.Response(200, text="<html>oops</html>"))

    assert info.value.status is None
    assert info.value.body == "<html>oops</html>"


def test_fetch_series_rejects_non_object_payload() -> None:
    with pytest.raises(DecodeError, match="not a JSON object"):
        _fetch(lambda request: httpx.Response(200, json=[1, 2, 3]))


def test_fetch_series_rejects_non_object_hourly() -> None:
    with pytest.raises(DecodeError, match="'hourly'"):
        _fetch(lambda request: httpx.Response(200, json={"hourly": [1]}))


def test_fetch_series_network_failure_raises_transport_error() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as info:
        _fetch(_handler)

    assert info.value.status is None


def test_fetch_series_issues_single_request_without_retry() -> None:
    seen: list[str] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(503, text="busy")

    with pytest.raises(TransportError):
        _fetch(_handler)

    assert seen == [URL]


def test_payload_without_hourly_leaves_timestamps_absent() -> None:
    payload = RawPayload.from_json({"latitude": 1.0})

    assert payload.timestamps is None
    assert payload.per_parameter == {}


def test_load_weather_data_builds_request_from_config() -> None:
    seen: list[httpx.URL] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        return httpx.Response(200, json=PAYLOAD)

    async def _run() -> RawPayload:
        async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as client:
            return await load_weather_data(ChartConfig(parameters=("temperature_2m", "rain")), client=client)

    payload = asyncio.run(_run())

    assert payload.units_by_parameter["rain"] == "mm"
    assert seen[0].params["hourly"] == "temperature_2m,rain"
    assert seen[0].host == "api.open-meteo.com"


def test_null_unit_becomes_empty_string() -> None:
    payload = RawPayload.from_json(
        {
            "hourly": {"time": ["2024-01-05T00:00"], "snowfall": [0.0]},
            "hourly_units": {"time": "iso8601", "snowfall": None},
        }
    )

    assert payload.units_by_parameter == {"snowfall": ""}
