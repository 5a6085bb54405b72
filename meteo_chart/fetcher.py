"""Async forecast fetching and payload decoding.

Purpose
-------
``fetch_series`` issues one GET for a built request URL and returns a
:class:`RawPayload`. There are no retries and no caching: a failed attempt is
surfaced immediately and every chart cycle fetches again.

Failures
--------
- Non-success status or network failure: :class:`~meteo_chart.errors.TransportError`.
- Body that is not JSON, or JSON of the wrong shape: :class:`~meteo_chart.errors.DecodeError`.

A missing ``hourly.time`` is *not* a decode failure here; it is left as
``timestamps=None`` and reported by the grouper as
:class:`~meteo_chart.errors.MissingTimeDataError`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

import httpx

from .chart_config import ChartConfig, EndpointSettings
from .errors import DecodeError, TransportError
from .request_builder import build_request

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

TIME_KEY = "time"


@dataclass(frozen=True)
class RawPayload:
    """Decoded forecast payload.

    Parameters
    ----------
    timestamps : sequence or None
        Raw ``hourly.time`` value. ``None`` when absent; left unvalidated so the
        grouper can report it.
    per_parameter : dict[str, sequence]
        Value sequences keyed by parameter name, in payload order, without the
        time key.
    units_by_parameter : dict[str, str]
        Unit string for each parameter that reports one.
    """

    timestamps: Optional[Any]
    per_parameter: Dict[str, Sequence[Optional[float]]] = field(default_factory=dict)
    units_by_parameter: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Any) -> "RawPayload":
        """Build a payload from the decoded JSON document.

        Raises
        ------
        DecodeError
            If the document, ``hourly`` or ``hourly_units`` is not an object.
        """
        if not isinstance(data, Mapping):
            raise DecodeError("Forecast payload is not a JSON object", body=repr(data)[:200])

        hourly = data.get("hourly")
        if hourly is None:
            hourly = {}
        elif not isinstance(hourly, Mapping):
            raise DecodeError("Forecast payload 'hourly' is not an object", body=repr(hourly)[:200])

        units = data.get("hourly_units")
        if units is None:
            units = {}
        elif not isinstance(units, Mapping):
            raise DecodeError("Forecast payload 'hourly_units' is not an object", body=repr(units)[:200])

        return cls(
            timestamps=hourly.get(TIME_KEY),
            per_parameter={str(k): v for k, v in hourly.items() if k != TIME_KEY},
            units_by_parameter={str(k): "" if v is None else str(v) for k, v in units.items() if k != TIME_KEY},
        )


async def fetch_series(
    request: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    timeout: float = 10.0,
) -> RawPayload:
    """Fetch ``request`` and decode it into a :class:`RawPayload`.

    Parameters
    ----------
    request : str
        URL produced by :func:`~meteo_chart.request_builder.build_request`.
    client : httpx.AsyncClient, optional
        Client to use. When omitted a short-lived client is created and closed.
    timeout : float
        Timeout in seconds for a client created here.

    Returns
    -------
    RawPayload

    Raises
    ------
    TransportError
        Non-success status (``status`` and ``body`` set) or network failure
        (``status=None``).
    DecodeError
        Body is not JSON or does not have the expected structure.
    """
    close_client = False
    if client is None:
        client = httpx.AsyncClient(timeout=timeout)
        close_client = True
    try:
        logger.debug("GET %s", request)
        try:
            resp = await client.get(request)
        except httpx.HTTPError as exc:
            raise TransportError(f"Forecast request failed: {exc}", status=None, body="") from exc

        if not resp.is_success:
            raise TransportError(
                f"Forecast fetch failed: {resp.status_code} {resp.text}",
                status=resp.status_code,
                body=resp.text,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise DecodeError("Forecast response is not valid JSON", status=None, body=resp.text) from exc
    finally:
        if close_client:
            await client.aclose()

    return RawPayload.from_json(data)


async def load_weather_data(
    config: ChartConfig,
    settings: Optional[EndpointSettings] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> RawPayload:
    """Build the request for ``config`` and fetch it in one call."""
    settings = settings or EndpointSettings()
    return await fetch_series(build_request(config, settings), client=client, timeout=settings.timeout_s)


__all__ = ["RawPayload", "fetch_series", "load_weather_data", "TIME_KEY"]
