"""Property-based tests for unit-axis grouping invariants."""

from __future__ import annotations

import pytest

from meteo_chart import PALETTE, group_series
from meteo_chart.fetcher import RawPayload

try:
    from hypothesis import given
    from hypothesis import strategies as st
except ModuleNotFoundError:  # pragma: no cover - environment-specific fallback
    pytest.skip("hypothesis is required for property-based tests", allow_module_level=True)


UNITS = st.sampled_from(["°C", "mm", "cm", "%", "km/h", ""])
NAMES = st.lists(
    st.text(alphabet="abcdefghijklmnopqrstuvwxyz_", min_size=1, max_size=8),
    min_size=1,
    max_size=12,
    unique=True,
)


@st.composite
def payloads(draw):
    names = draw(NAMES)
    units = {name: draw(UNITS) for name in names}
    n_times = draw(st.integers(min_value=0, max_value=24))
    times = [f"2024-02-{1 + h // 24:02d}T{h % 24:02d}:00" for h in range(n_times)]
    present = draw(st.lists(st.sampled_from(names), unique=True))
    values = {
        name: draw(
            st.lists(
                st.one_of(st.none(), st.floats(allow_nan=False, allow_infinity=False)),
                min_size=n_times,
                max_size=n_times,
            )
        )
        for name in present
    }
    payload = RawPayload(timestamps=times, per_parameter=values, units_by_parameter=units)
    return payload, names


@given(payloads())
def test_every_series_matches_label_length(case) -> None:
    payload, names = case
    grouped = group_series(payload, names)

    assert len(grouped.labels) == len(payload.timestamps)
    assert all(len(s.values) == len(grouped.labels) for s in grouped.series)


@given(payloads())
def test_axes_partition_series_by_unit(case) -> None:
    payload, names = case
    grouped = group_series(payload, names)

    for a in grouped.series:
        for b in grouped.series:
            assert (a.unit == b.unit) == (a.axis_id == b.axis_id)
    assert len(grouped.axes) == len({s.unit for s in grouped.series})
    assert [a.id for a in grouped.axes] == [f"y{i}" for i in range(len(grouped.axes))]


@given(payloads())
def test_only_first_axis_is_left(case) -> None:
    payload, names = case
    grouped = group_series(payload, names)

    assert grouped.axes[0].position == "left"
    assert grouped.axes[0].is_first
    assert all(a.position == "right" and not a.is_first for a in grouped.axes[1:])


@given(payloads())
def test_color_is_position_modulo_palette(case) -> None:
    payload, names = case
    grouped = group_series(payload, names)

    assert [s.color for s in grouped.series] == [PALETTE[i % len(PALETTE)] for i in range(len(names))]
