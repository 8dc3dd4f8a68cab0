"""Color palette and the Textual theme built from it."""

from __future__ import annotations

from textual.theme import Theme as TextualTheme

THEME_NAME = "inspire-monokai"

DEFAULT_THEME = {
    "background": "#272822",
    "panel": "#1e1e1e",
    "panel_alt": "#3e3d32",
    "border": "#75715e",
    "text": "#f8f8f2",
    "muted": "#75715e",
    "accent": "#66d9ef",
    "accent_alt": "#e6db74",
    "green": "#a6e22e",
    "yellow": "#e6db74",
    "orange": "#fd971f",
    "pink": "#f92672",
    "purple": "#ae81ff",
    "highlight": "#49483e",
    "selection": "#3d4a32",
}

THEME_COLORS = DEFAULT_THEME.copy()

# Status line color per severity
SEVERITY_COLORS = {
    "information": "muted",
    "warning": "orange",
    "error": "pink",
}


def _build_textual_theme(name: str, colors: dict[str, str]) -> TextualTheme:
    """Convert an app color dict to a Textual Theme with custom CSS variables."""
    variables = {
        "th-background": colors["background"],
        "th-panel": colors["panel"],
        "th-panel-alt": colors["panel_alt"],
        "th-highlight": colors["highlight"],
        "th-accent": colors["accent"],
        "th-muted": colors["muted"],
        "th-text": colors["text"],
    }
    return TextualTheme(
        name=name,
        primary=colors["accent"],
        secondary=colors["accent_alt"],
        accent=colors["green"],
        foreground=colors["text"],
        background=colors["background"],
        surface=colors["panel"],
        panel=colors["panel_alt"],
        warning=colors["orange"],
        error=colors["pink"],
        success=colors["green"],
        dark=True,
        variables=variables,
    )


TEXTUAL_THEME = _build_textual_theme(THEME_NAME, DEFAULT_THEME)


__all__ = [
    "DEFAULT_THEME",
    "SEVERITY_COLORS",
    "TEXTUAL_THEME",
    "THEME_COLORS",
    "THEME_NAME",
]
