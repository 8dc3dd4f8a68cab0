"""Parsing for INSPIRE search responses and arXiv Atom feeds."""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any

from inspire_browser.models import ResultEntry

logger = logging.getLogger(__name__)

# arXiv API / Atom parsing constants
ATOM_NS = {"atom": "http://www.w3.org/2005/Atom", "arxiv": "http://arxiv.org/schemas/atom"}
ARXIV_ABS_PREFIX = "http://arxiv.org/abs/"

# Strip trailing version suffix from IDs (e.g., 2401.12345v2 -> 2401.12345)
_ARXIV_VERSION_SUFFIX = re.compile(r"v(\d+)$", re.IGNORECASE)
_YEAR_PREFIX = re.compile(r"^(\d{4})")


@dataclass(frozen=True, slots=True)
class PreprintLink:
    """The single arXiv entry returned for an ``id_list`` lookup."""

    entry_id: str
    pdf_url: str


def normalize_arxiv_id(raw: str) -> str:
    """Normalize arXiv IDs from raw IDs or URLs.

    Examples:
    - https://arxiv.org/abs/2401.12345v2 -> 2401.12345
    - https://arxiv.org/pdf/2401.12345v2.pdf -> 2401.12345
    - hep-th/9901001v1 -> hep-th/9901001
    """
    text = raw.strip()
    if not text:
        return ""

    if "arxiv.org" in text:
        for marker in ("/abs/", "/pdf/"):
            idx = text.find(marker)
            if idx >= 0:
                text = text[idx + len(marker) :]
                break

    text = text.split("?", 1)[0].split("#", 1)[0].strip().strip("/")
    text = text.removesuffix(".pdf")
    return _ARXIV_VERSION_SUFFIX.sub("", text)


def preprint_filename(arxiv_id: str, version: int) -> str:
    """File name for a stored preprint; old-style ids keep only the number."""
    basename = arxiv_id.rsplit("/", 1)[-1]
    return f"{basename}v{version}.pdf"


# ============================================================================
# INSPIRE literature search
# ============================================================================


def _first_str(items: Any, key: str) -> str | None:
    """Return ``items[0][key]`` when it is a non-empty string."""
    if not isinstance(items, list):
        return None
    for item in items:
        if isinstance(item, dict):
            value = item.get(key)
            if isinstance(value, str) and value.strip():
                return " ".join(value.split())
    return None


def _parse_authors(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return ()
    names: list[str] = []
    for author in raw:
        if not isinstance(author, dict):
            continue
        name = author.get("last_name") or author.get("full_name")
        if isinstance(name, str) and name.strip():
            names.append(name.strip())
    return tuple(names)


def _parse_eprints(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return ()
    eprints: list[str] = []
    for eprint in raw:
        if isinstance(eprint, dict):
            value = eprint.get("value")
            if isinstance(value, str) and value.strip() and value.strip() not in eprints:
                eprints.append(value.strip())
    return tuple(eprints)


def _parse_year(publication_info: Any, created: str) -> int | None:
    if isinstance(publication_info, list):
        for info in publication_info:
            if isinstance(info, dict) and isinstance(info.get("year"), int):
                return info["year"]
    match = _YEAR_PREFIX.match(created)
    return int(match.group(1)) if match else None


def parse_inspire_hit(hit: dict[str, Any]) -> ResultEntry | None:
    """Convert one INSPIRE hit to a ``ResultEntry``; ``None`` if it has no id."""
    metadata = hit.get("metadata")
    if not isinstance(metadata, dict):
        return None
    control_number = metadata.get("control_number")
    if not isinstance(control_number, int | str) or isinstance(control_number, bool):
        return None

    created_raw = hit.get("created")
    created = created_raw.split("T", 1)[0] if isinstance(created_raw, str) else ""
    eprints = _parse_eprints(metadata.get("arxiv_eprints"))
    publication_info = metadata.get("publication_info")

    return ResultEntry(
        id=str(control_number),
        title=_first_str(metadata.get("titles"), "title") or "",
        authors=_parse_authors(metadata.get("authors")),
        venue=_first_str(publication_info, "journal_title"),
        year=_parse_year(publication_info, created),
        created=created,
        eprints=eprints,
        download_ref=eprints[0] if eprints else None,
    )


def parse_inspire_response(payload: Any) -> list[ResultEntry]:
    """Parse an INSPIRE ``/api/literature`` JSON payload.

    Raises:
        ValueError: If the payload lacks the ``hits.hits`` list.
    """
    hits = payload.get("hits") if isinstance(payload, dict) else None
    inner = hits.get("hits") if isinstance(hits, dict) else None
    if not isinstance(inner, list):
        raise ValueError("INSPIRE response has no hits list")

    entries: list[ResultEntry] = []
    seen_ids: set[str] = set()
    for hit in inner:
        if not isinstance(hit, dict):
            continue
        entry = parse_inspire_hit(hit)
        if entry is None or entry.id in seen_ids:
            continue
        seen_ids.add(entry.id)
        entries.append(entry)
    return entries


# ============================================================================
# arXiv preprint lookup
# ============================================================================


def _atom_text(node: ET.Element, path: str) -> str:
    """Extract normalized text from an Atom XML node path."""
    found = node.find(path, ATOM_NS)
    if found is None or found.text is None:
        return ""
    return " ".join(found.text.split())


def parse_arxiv_preprint_feed(xml_text: str) -> PreprintLink:
    """Extract the entry id and PDF link from an arXiv ``id_list`` response.

    Raises:
        ValueError: If the feed is invalid, does not hold exactly one entry, or
            the entry has no PDF link.
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise ValueError("Invalid arXiv API XML response") from exc

    entries = root.findall("atom:entry", ATOM_NS)
    if len(entries) != 1:
        raise ValueError(f"expected one arXiv entry, got {len(entries)}")
    entry = entries[0]

    for link in entry.findall("atom:link", ATOM_NS):
        if link.get("title") == "pdf" and link.get("href"):
            return PreprintLink(entry_id=_atom_text(entry, "atom:id"), pdf_url=link.get("href", ""))
    raise ValueError("arXiv entry has no PDF link")


def validate_preprint_identity(entry_id: str, requested_id: str, pdf_url: str) -> tuple[str, int]:
    """Check an arXiv entry against the requested eprint and its PDF URL.

    Returns:
        Tuple of (versioned basename, version), e.g. ``("2101.00001v2", 2)``.

    Raises:
        ValueError: On an unexpected id, mismatching ids or versions, or a PDF
            URL without a version suffix.
    """
    if not entry_id.startswith(ARXIV_ABS_PREFIX):
        raise ValueError(f"unexpected arXiv id {entry_id!r}")
    identifier = entry_id[len(ARXIV_ABS_PREFIX) :]

    id_version: str | None = None
    match = _ARXIV_VERSION_SUFFIX.search(identifier)
    if match:
        id_version = match.group(1)
        identifier = identifier[: match.start()]

    if identifier != requested_id:
        raise ValueError(
            f"inconsistent ids: arXiv = {identifier!r}, external reference = {requested_id!r}"
        )

    index = pdf_url.rfind("/")
    if index < 0 or index >= len(pdf_url) - 1:
        raise ValueError(f"unexpected url structure {pdf_url!r}")
    basename = pdf_url[index + 1 :].removesuffix(".pdf")

    url_match = _ARXIV_VERSION_SUFFIX.search(basename)
    if url_match is None:
        raise ValueError(f"no version suffix in {pdf_url!r}")
    url_version = url_match.group(1)

    if id_version is not None and id_version != url_version:
        raise ValueError(
            f"inconsistent versions: id = {entry_id!r} ({id_version}), "
            f"url = {pdf_url!r} ({url_version})"
        )

    return basename, int(url_version)


__all__ = [
    "ARXIV_ABS_PREFIX",
    "ATOM_NS",
    "PreprintLink",
    "normalize_arxiv_id",
    "parse_arxiv_preprint_feed",
    "parse_inspire_hit",
    "parse_inspire_response",
    "preprint_filename",
    "validate_preprint_identity",
]
