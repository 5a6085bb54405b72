"""Configuration records for weather charts.

Purpose
-------
``ChartConfig`` is the per-request configuration (coordinates, hourly
parameters, forecast model, title). ``EndpointSettings`` holds the constants
of the forecast endpoint. Both are frozen dataclasses; a chart cycle derives
a new ``ChartConfig`` with :meth:`ChartConfig.with_parameters` instead of
mutating the configured one.

Inbound configuration
---------------------
Host pages hand over a flat mapping (``latitude``, ``longitude``, ``hourly``,
``models``, ``title``) and optionally a JSON object as text content.
:meth:`ChartConfig.from_mapping` normalizes both.

Examples
--------
>>> cfg = ChartConfig.from_mapping({"hourly": "temperature_2m, rain", "title": "Melbourne"})
>>> cfg.parameters
('temperature_2m', 'rain')
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
DEFAULT_FIXED_LOCATION: Tuple[float, float] = (-37.814, 144.9633)
DEFAULT_TIMEZONE = "Australia/Sydney"


@dataclass(frozen=True)
class EndpointSettings:
    """Forecast endpoint constants.

    Parameters
    ----------
    base_url : str
        Forecast endpoint URL.
    fixed_location : tuple[float, float] or None
        ``(latitude, longitude)`` written into every request. ``None`` means
        the caller's ``ChartConfig`` coordinates are used instead.
    timezone : str
        Timezone identifier sent with every request.
    timeout_s : float
        HTTP timeout in seconds.
    """

    base_url: str = FORECAST_URL
    fixed_location: Optional[Tuple[float, float]] = DEFAULT_FIXED_LOCATION
    timezone: str = DEFAULT_TIMEZONE
    timeout_s: float = 10.0


@dataclass(frozen=True)
class ChartConfig:
    """Immutable request configuration for one chart.

    Parameters
    ----------
    latitude, longitude : float or None
        Caller-supplied coordinates.
    parameters : tuple[str, ...]
        Ordered hourly parameter names.
    model_name : str or None
        Forecast model identifier (``models`` query key).
    title : str or None
        Chart title; empty or ``None`` hides the title.
    """

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    parameters: Tuple[str, ...] = field(default_factory=tuple)
    model_name: Optional[str] = None
    title: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", tuple(str(p) for p in self.parameters))

    def with_parameters(self, parameters: Sequence[str]) -> "ChartConfig":
        """Return a copy using ``parameters`` as the hourly parameter list."""
        return replace(self, parameters=tuple(parameters))

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]] = None, content: Optional[str] = None) -> "ChartConfig":
        """Build a config from an inbound option mapping.

        Parameters
        ----------
        options : Mapping, optional
            Flat options. ``hourly`` may be a comma-separated string or a
            sequence of names.
        content : str, optional
            Text content of the host element. When latitude or longitude is
            missing and the text looks like a JSON object, its keys override
            ``options``.

        Returns
        -------
        ChartConfig
        """
        merged: dict[str, Any] = dict(options or {})

        if (merged.get("latitude") in (None, "") or merged.get("longitude") in (None, "")) and content:
            text = content.strip()
            if text.startswith("{"):
                try:
                    parsed = json.loads(text)
                except ValueError as exc:
                    logger.warning("Failed to parse JSON chart options from content: %s", exc)
                else:
                    if isinstance(parsed, Mapping):
                        merged.update(parsed)
                    else:
                        logger.warning("Ignoring JSON chart options that are not an object")

        return cls(
            latitude=_optional_float(merged.get("latitude")),
            longitude=_optional_float(merged.get("longitude")),
            parameters=_split_parameters(merged.get("hourly")),
            model_name=merged.get("models") or None,
            title=merged.get("title") or None,
        )


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def _split_parameters(value: Any) -> Tuple[str, ...]:
    """Normalize ``hourly`` into a tuple of trimmed, non-empty names."""
    if value is None:
        return ()
    items = value.split(",") if isinstance(value, str) else value
    return tuple(s for s in (str(item).strip() for item in items) if s)


__all__ = [
    "ChartConfig",
    "EndpointSettings",
    "FORECAST_URL",
    "DEFAULT_FIXED_LOCATION",
    "DEFAULT_TIMEZONE",
]
