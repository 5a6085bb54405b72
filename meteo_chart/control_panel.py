"""Parameter selector controls for the weather chart."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import ipywidgets as widgets

# Checkbox key -> hourly API parameter, in display order.
KNOWN_PARAMETERS: Dict[str, str] = {
    "temperature": "temperature_2m",
    "rain": "rain",
    "snowfall": "snowfall",
}

DEFAULT_SELECTION: Tuple[str, ...] = ("temperature_2m", "rain")


class ParameterControls:
    """One checkbox per known hourly parameter.

    Parameters
    ----------
    initial : sequence of str, optional
        Parameters to check initially. When empty, ``DEFAULT_SELECTION`` is
        checked. Unknown names are ignored.
    on_change : callable, optional
        Called with the traitlets change payload whenever a checkbox toggles.
    """

    def __init__(
        self,
        initial: Optional[Sequence[str]] = None,
        *,
        on_change: Optional[Callable[[Any], None]] = None,
    ) -> None:
        initial = tuple(initial or ())
        checked = initial if initial else DEFAULT_SELECTION

        self._checkboxes: Dict[str, widgets.Checkbox] = {}
        for key, param in KNOWN_PARAMETERS.items():
            self._checkboxes[param] = widgets.Checkbox(
                value=param in checked,
                description=key.capitalize(),
                indent=False,
                layout=widgets.Layout(width="auto"),
            )

        self.widget = widgets.HBox(
            list(self._checkboxes.values()),
            layout=widgets.Layout(
                display="flex",
                flex_flow="row wrap",
                align_items="center",
                grid_gap="12px",
                padding="8px 0",
            ),
        )

        self._on_change: Optional[Callable[[Any], None]] = None
        if on_change is not None:
            self.observe(on_change)

    @property
    def checkboxes(self) -> Dict[str, widgets.Checkbox]:
        """Checkbox widgets keyed by API parameter name."""
        return dict(self._checkboxes)

    def selected(self) -> List[str]:
        """Return the checked parameters in display order."""
        return [param for param, cb in self._checkboxes.items() if cb.value]

    def set_selected(self, parameters: Sequence[str]) -> None:
        """Check exactly ``parameters`` (unknown names ignored)."""
        wanted = set(parameters)
        for param, cb in self._checkboxes.items():
            cb.value = param in wanted

    def observe(self, callback: Callable[[Any], None]) -> None:
        """Attach ``callback`` to every checkbox, replacing any previous one."""
        self.unobserve()
        self._on_change = callback
        for cb in self._checkboxes.values():
            cb.observe(callback, names="value")

    def unobserve(self) -> None:
        """Detach the current change callback."""
        if self._on_change is None:
            return
        for cb in self._checkboxes.values():
            cb.unobserve(self._on_change, names="value")
        self._on_change = None


__all__ = ["KNOWN_PARAMETERS", "DEFAULT_SELECTION", "ParameterControls"]
