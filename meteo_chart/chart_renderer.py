"""Plotly rendering of grouped weather series.

Purpose
-------
``build_figure`` translates labels, series and axes into a
``plotly.graph_objects.Figure``. ``render_chart`` mounts that figure as a
``FigureWidget`` into an ``ipywidgets`` box, releasing any previous chart
first so a mount point never holds two live charts.

Axis mapping
------------
Axis ``y0`` becomes Plotly's primary ``yaxis`` on the left and draws the grid.
Axis ``yN`` becomes ``yaxis{N+1}`` overlaying it on the right. From the third
axis on, right axes are free-anchored with ``autoshift`` so tick labels do not
overlap.

Layout contract
---------------
The chart host box carries an explicit pixel height (``ChartPaneStyle.height``)
so the ``FigureWidget`` has a stable size inside flexible notebook layouts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import ipywidgets as W
import plotly.graph_objects as go

from .errors import ContainerNotFoundError
from .series_grouping import Axis, GroupedSeries

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

LINE_SMOOTHING = 0.2


@dataclass(frozen=True)
class ChartPaneStyle:
    """Visual options for the box wrapping the chart widget.

    Parameters
    ----------
    height:
        CSS height of the chart host. Must resolve to pixels for Plotly sizing.
    padding_px:
        Inner padding of the wrapper.
    border:
        CSS border of the wrapper.
    """

    height: str = "360px"
    padding_px: int = 8
    border: str = "1px solid rgba(15,23,42,0.08)"


@dataclass
class ChartHandle:
    """The live chart bound to one mount box.

    ``release()`` closes the widget and detaches it from the mount; it is safe
    to call more than once.
    """

    surface: W.Box
    figure_widget: go.FigureWidget
    wrapper: W.Box
    released: bool = field(default=False)

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        self.surface.children = tuple(c for c in self.surface.children if c is not self.wrapper)
        self.figure_widget.close()
        self.wrapper.close()


def axis_layout_key(index: int) -> str:
    """Return the Plotly layout key (``yaxis``, ``yaxis2``, ...) for axis ``index``."""
    return "yaxis" if index == 0 else f"yaxis{index + 1}"


def axis_trace_ref(index: int) -> str:
    """Return the trace ``yaxis`` reference (``y``, ``y2``, ...) for axis ``index``."""
    return "y" if index == 0 else f"y{index + 1}"


def _axis_layout(axis: Axis, index: int) -> Dict[str, Any]:
    axis_spec: Dict[str, Any] = {
        "side": axis.position,
        "showgrid": axis.is_first,
    }
    if axis.unit:
        axis_spec["title"] = {"text": axis.unit}
    if index > 0:
        axis_spec["overlaying"] = "y"
    if index > 1:
        axis_spec["anchor"] = "free"
        axis_spec["autoshift"] = True
    return axis_spec


def build_figure(grouped: GroupedSeries, title: Optional[str] = None) -> go.Figure:
    """Build a non-stacked multi-axis line figure.

    Parameters
    ----------
    grouped : GroupedSeries
        Labels, series and axes from :func:`~meteo_chart.series_grouping.group_series`.
    title : str, optional
        Chart title; shown only when non-empty.

    Returns
    -------
    plotly.graph_objects.Figure
    """
    index_by_id = {axis.id: i for i, axis in enumerate(grouped.axes)}
    labels = list(grouped.labels)

    fig = go.Figure()
    for s in grouped.series:
        fig.add_trace(
            go.Scatter(
                x=labels,
                y=s.values,
                name=s.name,
                mode="lines",
                line={"color": s.color, "shape": "spline", "smoothing": LINE_SMOOTHING},
                yaxis=axis_trace_ref(index_by_id[s.axis_id]),
            )
        )

    layout: Dict[str, Any] = {
        "showlegend": True,
        "legend": {"orientation": "h", "yanchor": "bottom", "y": 1.02, "xanchor": "left", "x": 0.0},
        "hovermode": "x unified",
        "margin": {"l": 60, "r": 60, "t": 60 if title else 30, "b": 40},
        "xaxis": {"type": "category"},
    }
    for i, axis in enumerate(grouped.axes):
        layout[axis_layout_key(i)] = _axis_layout(axis, i)
    if title:
        layout["title"] = {"text": title}

    fig.update_layout(**layout)
    return fig


def render_chart(
    surface: Optional[W.Box],
    grouped: GroupedSeries,
    title: Optional[str] = None,
    *,
    previous: Optional[ChartHandle] = None,
    style: ChartPaneStyle = ChartPaneStyle(),
) -> ChartHandle:
    """Draw ``grouped`` into ``surface``, replacing any prior chart.

    Parameters
    ----------
    surface : ipywidgets.Box
        Mount box. Its children are replaced by the new chart.
    grouped : GroupedSeries
        Renderer input.
    title : str, optional
        Chart title.
    previous : ChartHandle, optional
        Handle from the prior cycle; released before drawing.
    style : ChartPaneStyle
        Wrapper styling.

    Returns
    -------
    ChartHandle

    Raises
    ------
    ContainerNotFoundError
        If ``surface`` is ``None``.
    """
    if surface is None:
        raise ContainerNotFoundError("Chart container not found")

    if previous is not None:
        previous.release()

    figure_widget = go.FigureWidget(build_figure(grouped, title))
    figure_widget.layout.autosize = True

    host = W.Box(
        [figure_widget],
        layout=W.Layout(
            width="100%",
            height=style.height,
            min_width="0",
            display="flex",
            flex_flow="column",
            overflow="hidden",
        ),
    )
    wrapper = W.Box(
        [host],
        layout=W.Layout(
            width="100%",
            min_width="0",
            padding=f"{int(style.padding_px)}px",
            border=style.border,
            overflow="hidden",
        ),
    )
    surface.children = (wrapper,)
    logger.debug("Rendered %d series on %d axes", len(grouped.series), len(grouped.axes))
    return ChartHandle(surface=surface, figure_widget=figure_widget, wrapper=wrapper)


__all__ = [
    "ChartPaneStyle",
    "ChartHandle",
    "LINE_SMOOTHING",
    "axis_layout_key",
    "axis_trace_ref",
    "build_figure",
    "render_chart",
]
