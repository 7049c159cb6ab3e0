"""Registry of the surfaces editing one document session."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from ..events import SelectionChanged
from ..model.selection import Selection
from ..model.session import DocumentSession
from .surface import Surface

LOGGER = logging.getLogger(__name__)

__all__ = ["SurfaceManager"]


@dataclass(slots=True)
class _SurfaceState:
    surface: Optional[Surface]
    selection: Optional[Selection]


class SurfaceManager:
    """Keeps track of registered surfaces and which one has focus.

    Focus follows the ``surface_id`` carried by the session selection. The id
    is looked up as-is; a selection naming an unknown surface simply leaves
    no surface focused.
    """

    def __init__(self, session: DocumentSession) -> None:
        self.session = session
        self._surfaces: dict[str, Surface] = {}
        self._focused: Optional[Surface] = None
        self._stack: list[_SurfaceState] = []
        session.event_bus.subscribe(SelectionChanged, self._on_selection_changed)

    def dispose(self) -> None:
        self.session.event_bus.unsubscribe(SelectionChanged, self._on_selection_changed)
        self._surfaces.clear()
        self._focused = None

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def register_surface(self, surface: Surface) -> None:
        if surface.get_id() in self._surfaces:
            LOGGER.debug("Replacing surface %s", surface.get_id())
        self._surfaces[surface.get_id()] = surface

    def unregister_surface(self, surface: Surface | str) -> None:
        surface_id = surface if isinstance(surface, str) else surface.get_id()
        removed = self._surfaces.pop(surface_id, None)
        if removed is not None and removed is self._focused:
            self._focused = None

    def get_surface(self, surface_id: str) -> Optional[Surface]:
        return self._surfaces.get(surface_id)

    def __contains__(self, surface_id: object) -> bool:
        return surface_id in self._surfaces

    def __iter__(self) -> Iterator[Surface]:
        return iter(list(self._surfaces.values()))

    def __len__(self) -> int:
        return len(self._surfaces)

    # ------------------------------------------------------------------
    # Focus
    # ------------------------------------------------------------------

    def focused_surface(self) -> Optional[Surface]:
        return self._focused

    def focus(self, surface_id: str) -> Optional[Surface]:
        surface = self._surfaces.get(surface_id)
        if surface is None:
            LOGGER.warning("Can not focus unknown surface %s", surface_id)
            return None
        self._focused = surface
        return surface

    def surface_for_selection(self, selection: Selection | None) -> Optional[Surface]:
        """Return the registered surface named by ``selection.surface_id``."""

        if selection is None or selection.is_null():
            return None
        surface_id = selection.surface_id
        if surface_id is None:
            return None
        return self._surfaces.get(surface_id)

    def push_state(self) -> None:
        """Remember the focused surface and its selection, then drop focus."""

        selection = self._focused.get_selection() if self._focused is not None else None
        self._stack.append(_SurfaceState(self._focused, selection))
        self._focused = None

    def pop_state(self) -> None:
        if not self._stack:
            return
        state = self._stack.pop()
        if state.surface is None:
            return
        self._focused = state.surface
        if state.selection is not None:
            state.surface.set_selection(state.selection)

    def _on_selection_changed(self, event: SelectionChanged) -> None:
        self._focused = self.surface_for_selection(event.selection)
