"""UI-facing copy builders for errors and notifications."""

from __future__ import annotations

import httpx


def _ensure_sentence(text: str) -> str:
    """Return text with terminal sentence punctuation."""
    cleaned = text.strip()
    if not cleaned:
        return ""
    if cleaned.endswith((".", "!", "?")):
        return cleaned
    return f"{cleaned}."


def build_actionable_error(
    action: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Build a 2-3 line actionable error message."""
    lines = [f"Could not {action.strip()}."]
    if why:
        lines.append(f"Why: {_ensure_sentence(why)}")
    lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


def build_next_step_hint(next_step: str) -> str:
    """Build a canonical next-step guidance line."""
    return f"Next step: {_ensure_sentence(next_step)}"


def describe_http_failure(action: str, exc: Exception, *, service: str, retry_hint: str) -> str:
    """Map an httpx/OS failure to actionable copy for ``action`` against ``service``."""
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        if status_code == 429:
            return build_actionable_error(
                action,
                why=f"{service} rate limit reached (HTTP 429)",
                next_step=f"wait a few seconds and {retry_hint}",
            )
        if status_code >= 500:
            return build_actionable_error(
                action,
                why=f"{service} is unavailable right now (HTTP {status_code})",
                next_step=f"{retry_hint} in a minute",
            )
        return build_actionable_error(
            action,
            why=f"{service} rejected the request (HTTP {status_code})",
            next_step=retry_hint,
        )
    return build_actionable_error(
        action,
        why="a network or I/O error occurred",
        next_step=f"check connectivity and {retry_hint}",
    )


def first_line(message: str) -> str:
    """Return the first non-empty line of a (possibly multi-line) message."""
    for line in message.splitlines():
        if line.strip():
            return line.strip()
    return ""


__all__ = [
    "build_actionable_error",
    "build_next_step_hint",
    "describe_http_failure",
    "first_line",
]
