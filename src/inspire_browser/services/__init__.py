"""Internal service layer: remote search, preprint download and adapters."""

from inspire_browser.services.download_service import fetch_preprint
from inspire_browser.services.inspire_api_service import build_search_params, search_literature

__all__ = [
    "build_search_params",
    "fetch_preprint",
    "search_literature",
]
