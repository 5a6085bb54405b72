"""Error kinds raised while fetching, grouping and rendering weather charts.

Every error is terminal for one chart cycle only. :class:`~meteo_chart.weather_chart.WeatherChart`
catches them at the cycle boundary, logs the detail and shows a generic
message instead.
"""

from __future__ import annotations

from typing import Optional


class ChartError(RuntimeError):
    """Base class for all chart-cycle failures."""


class FetchError(ChartError):
    """Failure while retrieving or decoding the forecast payload.

    Parameters
    ----------
    message : str
        Human-readable summary.
    status : int or None
        HTTP status of the response, or ``None`` when no usable status exists
        (network failure, undecodable body).
    body : str
        Raw response text, possibly empty.
    """

    def __init__(self, message: str, *, status: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class TransportError(FetchError):
    """Non-success HTTP status or a network failure."""


class DecodeError(FetchError):
    """Payload could not be parsed into the expected structure."""


class MissingTimeDataError(ChartError):
    """The payload carries no ``hourly.time`` sequence."""


class ContainerNotFoundError(ChartError):
    """The render target (mount box) is missing."""


__all__ = [
    "ChartError",
    "FetchError",
    "TransportError",
    "DecodeError",
    "MissingTimeDataError",
    "ContainerNotFoundError",
]
