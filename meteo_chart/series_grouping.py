"""Series construction and unit-based axis grouping.

Purpose
-------
This module turns a :class:`~meteo_chart.fetcher.RawPayload` into the three
inputs the renderer needs: display labels, one :class:`Series` per parameter
and one :class:`Axis` per distinct unit.

Grouping rules
--------------
Parameters are walked in request order. The first time a unit is seen a new
axis is allocated with id ``y0``, ``y1``, ... in order of first appearance;
the first allocated axis sits on the left, every later one on the right.
Parameters sharing a unit share that axis. Colors come from a fixed 8-entry
palette indexed by the parameter's position, independent of unit or axis.

The result is a pure function of the payload and the requested order, so
repeated cycles over the same data produce identical axis ids, positions and
colors.

Examples
--------
>>> from meteo_chart.fetcher import RawPayload
>>> payload = RawPayload(
...     timestamps=["2024-01-05T15:00"],
...     per_parameter={"temperature_2m": [21.5], "rain": [0.0]},
...     units_by_parameter={"temperature_2m": "°C", "rain": "mm"},
... )
>>> grouped = group_series(payload, ["temperature_2m", "rain"])
>>> [(a.id, a.position) for a in grouped.axes]
[('y0', 'left'), ('y1', 'right')]
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Literal, Optional, Sequence, Tuple

import numpy as np

from .errors import DecodeError, MissingTimeDataError
from .fetcher import RawPayload

PALETTE: Tuple[str, ...] = (
    "#037691",
    "#c95109",
    "#991ad6",
    "#da1710",
    "#2a9d8f",
    "#e9c46a",
    "#264653",
    "#f4a261",
)

AxisPosition = Literal["left", "right"]


@dataclass(frozen=True)
class Axis:
    """Shared y-scale for all series with one unit.

    Parameters
    ----------
    id : str
        ``y0``, ``y1``, ... in order of first appearance.
    unit : str
        Unit string, possibly empty.
    position : {"left", "right"}
        Placement; only the first axis is on the left.
    is_first : bool
        Whether this is the first axis of the grouping pass (draws grid lines).
    """

    id: str
    unit: str
    position: AxisPosition
    is_first: bool


@dataclass(frozen=True, eq=False)
class Series:
    """One named, unit-tagged sequence aligned 1:1 with the labels.

    ``values`` is a read-only float array; null entries are ``NaN``.
    """

    name: str
    unit: str
    values: np.ndarray
    color: str
    axis_id: str


@dataclass(frozen=True)
class GroupedSeries:
    """Renderer input produced by :func:`group_series`."""

    labels: Tuple[str, ...]
    series: Tuple[Series, ...]
    axes: Tuple[Axis, ...]

    def axis(self, axis_id: str) -> Axis:
        """Return the axis with ``axis_id``."""
        for axis in self.axes:
            if axis.id == axis_id:
                return axis
        raise KeyError(axis_id)


def series_color(index: int) -> str:
    """Return the palette color for the series at ``index``."""
    return PALETTE[index % len(PALETTE)]


def format_label(moment: datetime) -> str:
    """Render ``moment`` as ``"<Mon> <day>, <hour> <AM|PM>"``.

    >>> format_label(datetime(2024, 1, 5, 15))
    'Jan 5, 3 PM'
    """
    hour = moment.hour % 12 or 12
    suffix = "AM" if moment.hour < 12 else "PM"
    return f"{moment.strftime('%b')} {moment.day}, {hour} {suffix}"


def to_labels(timestamps: Sequence[Any]) -> Tuple[str, ...]:
    """Convert timestamps (ISO strings or datetimes) into display labels.

    Raises
    ------
    DecodeError
        If a timestamp cannot be parsed.
    """
    labels = []
    for raw in timestamps:
        if isinstance(raw, datetime):
            moment = raw
        else:
            try:
                moment = datetime.fromisoformat(str(raw))
            except ValueError as exc:
                raise DecodeError(f"Unparseable timestamp {raw!r}", body=str(raw)) from exc
        labels.append(format_label(moment))
    return tuple(labels)


def _as_values(name: str, raw: Optional[Sequence[Any]], length: int) -> np.ndarray:
    """Return a read-only float array of ``length`` entries for one parameter."""
    if raw is None:
        values = np.full(length, np.nan)
    else:
        if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
            raise DecodeError(f"Values for {name!r} are not a sequence", body=repr(raw)[:200])
        if len(raw) != length:
            raise DecodeError(
                f"Values for {name!r} have length {len(raw)}, expected {length}",
                body=repr(raw)[:200],
            )
        try:
            values = np.array([np.nan if v is None else v for v in raw], dtype=float)
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"Values for {name!r} are not numeric", body=repr(raw)[:200]) from exc
    values.setflags(write=False)
    return values


def group_series(payload: RawPayload, requested: Optional[Sequence[str]] = None) -> GroupedSeries:
    """Group payload parameters into series and unit axes.

    Parameters
    ----------
    payload : RawPayload
        Decoded forecast payload.
    requested : sequence of str, optional
        Parameters to plot, in order. When empty or omitted, every parameter
        in the payload is used in payload order.

    Returns
    -------
    GroupedSeries

    Raises
    ------
    MissingTimeDataError
        If ``payload.timestamps`` is absent or not a sequence.
    DecodeError
        If a timestamp is unparseable or a value sequence is malformed.

    Notes
    -----
    A requested parameter missing from the payload becomes an all-``NaN``
    series of label length instead of failing the pass.
    """
    timestamps = payload.timestamps
    if timestamps is None or isinstance(timestamps, (str, bytes)) or not isinstance(timestamps, Sequence):
        raise MissingTimeDataError("No hourly time data returned")

    labels = to_labels(timestamps)
    names = list(requested) if requested else list(payload.per_parameter)

    unit_to_axis: Dict[str, str] = {}
    axes: list[Axis] = []
    series: list[Series] = []
    for idx, name in enumerate(names):
        unit = payload.units_by_parameter.get(name, "")
        axis_id = unit_to_axis.get(unit)
        if axis_id is None:
            axis_id = f"y{len(axes)}"
            unit_to_axis[unit] = axis_id
            axes.append(
                Axis(
                    id=axis_id,
                    unit=unit,
                    position="left" if not axes else "right",
                    is_first=not axes,
                )
            )
        series.append(
            Series(
                name=name,
                unit=unit,
                values=_as_values(name, payload.per_parameter.get(name), len(labels)),
                color=series_color(idx),
                axis_id=axis_id,
            )
        )

    return GroupedSeries(labels=labels, series=tuple(series), axes=tuple(axes))


__all__ = [
    "PALETTE",
    "Axis",
    "Series",
    "GroupedSeries",
    "series_color",
    "format_label",
    "to_labels",
    "group_series",
]
