"""Top-level public API for the ``meteo_chart`` package.

This module re-exports the notebook-facing widget together with the pieces
it is composed of, so callers can use the full widget or any single step:

>>> from meteo_chart import ChartConfig, WeatherChart  # doctest: +SKIP
>>> WeatherChart(ChartConfig.from_mapping({"hourly": "temperature_2m,rain"}), auto_start=True)  # doctest: +SKIP

The individual steps (``build_request``, ``fetch_series``, ``group_series``,
``render_chart``) are plain functions and can be composed without widgets.
"""

from .chart_config import ChartConfig, EndpointSettings
from .chart_renderer import ChartHandle, ChartPaneStyle, build_figure, render_chart
from .control_panel import DEFAULT_SELECTION, KNOWN_PARAMETERS, ParameterControls
from .debouncing import Debouncer
from .errors import (
    ChartError,
    ContainerNotFoundError,
    DecodeError,
    FetchError,
    MissingTimeDataError,
    TransportError,
)
from .fetcher import RawPayload, fetch_series, load_weather_data
from .request_builder import build_request
from .series_grouping import (
    PALETTE,
    Axis,
    GroupedSeries,
    Series,
    group_series,
    series_color,
    to_labels,
)
from .weather_chart import ChartState, WeatherChart
