"""Reactive weather chart widget.

Purpose
-------
``WeatherChart`` composes the parameter checkboxes, a status line and a chart
mount box, and drives the fetch -> group -> render cycle whenever the
selection changes.

Cycle state machine
-------------------
Each cycle starts at ``LOADING`` (or goes straight to ``EMPTY`` when nothing is
selected, without fetching) and settles in exactly one of ``EMPTY``,
``ERROR`` or ``READY``. Errors are logged with full detail; the user only
sees a generic message. Nothing escapes to the caller, so the next toggle
starts a clean cycle.

Concurrency
-----------
Checkbox changes go through a trailing-edge :class:`~meteo_chart.debouncing.Debouncer`
(300 ms), so a burst of toggles yields one cycle. Cycles that overlap across
the fetch are ordered by a generation counter: when a fetch completes after a
newer cycle has started, its result (or failure) is discarded.

Without a running event loop each debounced cycle runs under ``asyncio.run``
on its timer thread. State changes, grouping and rendering then happen under
one lock, and the generation is re-checked inside it.

Ownership
---------
The widget owns the live :class:`~meteo_chart.chart_renderer.ChartHandle` and
hands it to the renderer as ``previous`` on every cycle; entering ``EMPTY`` or
``ERROR`` releases it. Fetcher, renderer and HTTP client are constructor
arguments rather than module globals.

Examples
--------
>>> from meteo_chart import ChartConfig, WeatherChart
>>> chart = WeatherChart(ChartConfig(title="Melbourne"))  # doctest: +SKIP
>>> chart  # doctest: +SKIP
"""

from __future__ import annotations

import asyncio
import logging
import threading
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Sequence

import httpx
import ipywidgets as widgets
from IPython.display import display

from .chart_config import ChartConfig, EndpointSettings
from .chart_renderer import ChartHandle, ChartPaneStyle, render_chart
from .control_panel import ParameterControls
from .debouncing import Debouncer
from .fetcher import RawPayload, fetch_series
from .request_builder import build_request
from .series_grouping import GroupedSeries, group_series

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

QUIET_INTERVAL_MS = 300

LOADING_MESSAGE = "Loading weather data..."
EMPTY_MESSAGE = "Select at least one variable to display."
ERROR_MESSAGE = "Error loading weather data."

Fetcher = Callable[..., Awaitable[RawPayload]]
Renderer = Callable[..., ChartHandle]


class ChartState(str, Enum):
    """Presentation state of the chart."""

    LOADING = "loading"
    EMPTY = "empty"
    ERROR = "error"
    READY = "ready"


class WeatherChart:
    """Checkbox-driven multi-axis weather chart.

    Parameters
    ----------
    config : ChartConfig, optional
        Request configuration. ``config.parameters`` seeds the initial
        checkbox selection.
    settings : EndpointSettings, optional
        Forecast endpoint constants.
    fetcher : callable, optional
        ``async fetcher(url, *, client, timeout) -> RawPayload``.
        Defaults to :func:`~meteo_chart.fetcher.fetch_series`.
    renderer : callable, optional
        ``renderer(surface, grouped, title, *, previous, style) -> ChartHandle``.
        Defaults to :func:`~meteo_chart.chart_renderer.render_chart`.
    client : httpx.AsyncClient, optional
        Shared HTTP client passed to the fetcher. An ``AsyncClient`` is bound
        to the loop it is used on; leave this unset when cycles run off-loop
        on timer threads, so each cycle opens its own client.
    debounce_ms : int
        Quiet interval for checkbox changes.
    style : ChartPaneStyle
        Chart wrapper styling.
    auto_start : bool
        If True, schedule the first cycle on construction.
    """

    def __init__(
        self,
        config: Optional[ChartConfig] = None,
        *,
        settings: Optional[EndpointSettings] = None,
        fetcher: Optional[Fetcher] = None,
        renderer: Optional[Renderer] = None,
        client: Optional[httpx.AsyncClient] = None,
        debounce_ms: int = QUIET_INTERVAL_MS,
        style: ChartPaneStyle = ChartPaneStyle(),
        auto_start: bool = False,
    ) -> None:
        self._config = config or ChartConfig()
        self._settings = settings or EndpointSettings()
        self._fetcher: Fetcher = fetcher or fetch_series
        self._renderer: Renderer = renderer or render_chart
        self._client = client
        self._style = style

        self._state = ChartState.EMPTY
        self._handle: Optional[ChartHandle] = None
        self._grouped: Optional[GroupedSeries] = None
        self._generation = 0
        self._tasks: set[asyncio.Task[Any]] = set()
        self._cycle_lock = threading.Lock()

        self.controls = ParameterControls(self._config.parameters)
        self.status = widgets.HTML(value="", layout=widgets.Layout(min_height="1.5em"))
        self.chart_box = widgets.Box(layout=widgets.Layout(width="100%", min_height="240px"))
        self.widget = widgets.VBox(
            [self.controls.widget, self.status, self.chart_box],
            layout=widgets.Layout(width="100%", min_height="240px"),
        )

        self._debouncer = Debouncer(self._launch_cycle, wait_ms=debounce_ms)
        self.controls.observe(self.request_update)

        if auto_start:
            self.request_update()

    # --- Public state ---

    @property
    def config(self) -> ChartConfig:
        return self._config

    @property
    def state(self) -> ChartState:
        """Current presentation state."""
        return self._state

    @property
    def handle(self) -> Optional[ChartHandle]:
        """Live chart handle, or ``None`` outside ``READY``."""
        return self._handle

    @property
    def grouped(self) -> Optional[GroupedSeries]:
        """Series and axes of the last ``READY`` cycle."""
        return self._grouped

    @property
    def generation(self) -> int:
        """Number of cycles started so far."""
        return self._generation

    @property
    def running_cycles(self) -> int:
        """Number of cycle tasks scheduled on the event loop and not yet done."""
        return len(self._tasks)

    # --- Triggers ---

    def request_update(self, *_: Any) -> None:
        """Schedule a debounced cycle. Signature accepts traitlets change payloads."""
        self._debouncer()

    def _launch_cycle(self) -> None:
        """Run one cycle from the debouncer callback."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.refresh())
            return
        task = loop.create_task(self.refresh())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def refresh(self, selection: Optional[Sequence[str]] = None) -> ChartState:
        """Run one fetch -> group -> render cycle immediately.

        Parameters
        ----------
        selection : sequence of str, optional
            Parameters to plot. Defaults to the checked controls.

        Returns
        -------
        ChartState
            The state this cycle settled in, or the current state if the cycle
            was superseded by a newer one.

        Notes
        -----
        Everything except the fetch runs under the cycle lock, so cycles
        started on different timer threads never render concurrently and a
        superseded cycle never draws after a newer one.
        """
        with self._cycle_lock:
            self._generation += 1
            generation = self._generation
            selected = list(self.controls.selected() if selection is None else selection)

            if not selected:
                self._release_handle()
                self._grouped = None
                self._set_state(ChartState.EMPTY)
                return self._state

            self._set_state(ChartState.LOADING)
        logger.debug("Cycle %d started for %s", generation, selected)

        try:
            request = build_request(self._config.with_parameters(selected), self._settings)
            payload = await self._fetcher(request, client=self._client, timeout=self._settings.timeout_s)
        except Exception:
            with self._cycle_lock:
                return self._fail_locked(generation)

        with self._cycle_lock:
            if generation != self._generation:
                logger.debug("Discarding stale result of cycle %d", generation)
                return self._state
            try:
                grouped = group_series(payload, selected)
                self._handle = self._renderer(
                    self.chart_box,
                    grouped,
                    self._config.title,
                    previous=self._handle,
                    style=self._style,
                )
            except Exception:
                return self._fail_locked(generation)

            self._grouped = grouped
            self._set_state(ChartState.READY)
            return self._state

    # --- Teardown ---

    def close(self) -> None:
        """Cancel pending work, release the chart and detach observers."""
        self._debouncer.cancel()
        self.controls.unobserve()
        for task in list(self._tasks):
            task.cancel()
        with self._cycle_lock:
            self._generation += 1
            self._release_handle()

    # --- Internal ---

    def _fail_locked(self, generation: int) -> ChartState:
        """Settle a failed cycle in ``ERROR`` unless it was superseded."""
        if generation != self._generation:
            logger.debug("Discarding stale failure of cycle %d", generation, exc_info=True)
            return self._state
        logger.exception("Weather chart update failed")
        self._release_handle()
        self._grouped = None
        self._set_state(ChartState.ERROR)
        return self._state

    def _release_handle(self) -> None:
        if self._handle is not None:
            self._handle.release()
            self._handle = None
        self.chart_box.children = ()

    def _set_state(self, state: ChartState) -> None:
        if state is not self._state:
            logger.info("Weather chart state %s -> %s", self._state.value, state.value)
        self._state = state
        self.status.value = {
            ChartState.LOADING: LOADING_MESSAGE,
            ChartState.EMPTY: EMPTY_MESSAGE,
            ChartState.ERROR: ERROR_MESSAGE,
            ChartState.READY: "",
        }[state]

    def _ipython_display_(self, **kwargs: Any) -> None:
        display(self.widget)


__all__ = [
    "ChartState",
    "WeatherChart",
    "QUIET_INTERVAL_MS",
    "LOADING_MESSAGE",
    "EMPTY_MESSAGE",
    "ERROR_MESSAGE",
]
