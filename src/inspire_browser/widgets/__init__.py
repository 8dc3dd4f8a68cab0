"""Widget classes for the terminal host."""

from inspire_browser.widgets.frame_view import FrameView, build_frame_text

__all__ = [
    "FrameView",
    "build_frame_text",
]
