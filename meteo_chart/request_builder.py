"""Forecast request construction."""

from __future__ import annotations

from typing import Optional

import httpx

from .chart_config import ChartConfig, EndpointSettings


def build_request(config: ChartConfig, settings: Optional[EndpointSettings] = None) -> str:
    """Return the fully-qualified forecast URL for ``config``.

    Parameters
    ----------
    config : ChartConfig
        Parameters, model and (when ``settings.fixed_location`` is ``None``)
        coordinates of the request.
    settings : EndpointSettings, optional
        Endpoint constants. Defaults to :class:`EndpointSettings`.

    Returns
    -------
    str
        URL with ``latitude``, ``longitude``, optional ``hourly`` and
        ``models``, and ``timezone`` query keys.

    Raises
    ------
    ValueError
        If no fixed location is configured and a coordinate is missing.

    Notes
    -----
    With the default settings the configured coordinates are ignored and the
    fixed location is always sent.
    """
    settings = settings or EndpointSettings()

    if settings.fixed_location is not None:
        latitude, longitude = settings.fixed_location
    else:
        if config.latitude is None or config.longitude is None:
            raise ValueError("latitude and longitude are required when no fixed location is configured")
        latitude, longitude = config.latitude, config.longitude

    params: list[tuple[str, str]] = [
        ("latitude", _format_coordinate(latitude)),
        ("longitude", _format_coordinate(longitude)),
    ]
    if config.parameters:
        params.append(("hourly", ",".join(config.parameters)))
    if config.model_name:
        params.append(("models", config.model_name))
    params.append(("timezone", settings.timezone))

    return str(httpx.URL(settings.base_url, params=params))


def _format_coordinate(value: float) -> str:
    return repr(float(value))


__all__ = ["build_request"]
