"""Internal UI constants for the InspireBrowser app."""

from __future__ import annotations

from textual.binding import Binding, BindingType

APP_CSS = """
Screen {
    background: $th-background;
    overflow: hidden;
}

#frame {
    width: 100%;
    height: 100%;
    background: $th-background;
    color: $th-text;
}
"""

# Escape, Enter and the editing keys are handled by the session, not by bindings.
APP_BINDINGS: list[BindingType] = [
    Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
]

__all__ = ["APP_BINDINGS", "APP_CSS"]
