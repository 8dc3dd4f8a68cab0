"""Debounced, generation-tagged search requests and the download protocol.

The pipeline never touches session state from a task. Network work runs in
tracked asyncio tasks that only ``post`` completion events; the session loop
hands those events back to the ``apply_*`` methods, which run synchronously on
the loop's single consumer.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from inspire_browser.action_messages import build_actionable_error
from inspire_browser.errors import DownloadError, LibraryError, SearchError
from inspire_browser.events import (
    DebounceElapsed,
    DownloadCompleted,
    DownloadFailedEvent,
    DownloadProgress,
    Event,
    SearchCompleted,
    SearchFailedEvent,
)
from inspire_browser.models import (
    DEFAULT_MIN_QUERY_LENGTH,
    DEFAULT_SEARCH_DEBOUNCE_MS,
    DownloadDone,
    DownloadFailed,
    DownloadInFlight,
    DownloadStatus,
    Idle,
    NoDownload,
    Pending,
    PipelineStatus,
    ResultEntry,
    SearchFailed,
)
from inspire_browser.result_list import ResultList
from inspire_browser.services.interfaces import FetchService, PreprintSink, SearchService

logger = logging.getLogger(__name__)

PostEvent = Callable[[Event], None]
CallLater = Callable[..., Any]

TASK_SHUTDOWN_TIMEOUT = 0.5  # Seconds to wait for cancelled tasks on close


class RequestPipeline:
    """Turns query edits into at most one live search and runs downloads.

    ``post`` delivers events to the session queue. ``call_later(delay, fn,
    *args)`` schedules the debounce timer and must return a handle with
    ``cancel()``; it defaults to the running loop's ``call_later``.
    """

    def __init__(
        self,
        *,
        search: SearchService,
        fetch: FetchService,
        sink: PreprintSink,
        post: PostEvent,
        debounce_seconds: float = DEFAULT_SEARCH_DEBOUNCE_MS / 1000,
        min_query_length: int = DEFAULT_MIN_QUERY_LENGTH,
        call_later: CallLater | None = None,
    ) -> None:
        self._search = search
        self._fetch = fetch
        self._sink = sink
        self._post = post
        self._debounce_seconds = debounce_seconds
        self._min_query_length = min_query_length
        self._call_later = call_later

        self._query = ""
        self._generation = 0
        self._debounce_token = 0
        self._timer: Any = None
        self._background_tasks: set[asyncio.Task[None]] = set()

        self.status: PipelineStatus = Idle()
        self.download_status: DownloadStatus = NoDownload()

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def query(self) -> str:
        return self._query

    @property
    def download_in_flight(self) -> bool:
        return isinstance(self.download_status, DownloadInFlight)

    @property
    def debounce_pending(self) -> bool:
        return self._timer is not None

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def query_changed(self, query: str) -> None:
        """Record ``query`` and restart the debounce timer."""
        self._query = query
        # Atomic swap: capture and clear before cancelling.
        old_timer = self._timer
        self._timer = None
        if old_timer is not None:
            old_timer.cancel()
        self._debounce_token += 1
        schedule = self._call_later or asyncio.get_running_loop().call_later
        self._timer = schedule(
            self._debounce_seconds, self._post, DebounceElapsed(self._debounce_token)
        )
        logger.debug("Debounce restarted (token %d) for %r", self._debounce_token, query)

    def on_debounce_elapsed(self, event: DebounceElapsed, results: ResultList) -> bool:
        """Dispatch the recorded query if ``event`` is the live timer."""
        if event.token != self._debounce_token:
            logger.debug("Ignoring superseded debounce token %d", event.token)
            return False
        self._timer = None

        query = self._query.strip()
        # Invalidate whatever is in flight; its result no longer matches the text.
        self._generation += 1
        generation = self._generation

        if not query or len(query) < self._min_query_length:
            logger.debug("Query %r below minimum length; clearing results", query)
            self.status = Idle()
            results.set_entries(())
            return True

        self.status = Pending(generation, query)
        logger.debug("Dispatching search %r (generation %d)", query, generation)
        self._track_task(self._run_search(generation, query))
        return True

    async def _run_search(self, generation: int, query: str) -> None:
        try:
            entries = tuple(await self._search.search(query))
        except SearchError as exc:
            self._post(SearchFailedEvent(generation, query, str(exc)))
            return
        except Exception as exc:
            logger.warning("Search %r failed unexpectedly", query, exc_info=True)
            self._post(
                SearchFailedEvent(
                    generation,
                    query,
                    build_actionable_error(
                        "search INSPIRE",
                        why=str(exc) or type(exc).__name__,
                        next_step="edit the query to search again",
                    ),
                )
            )
            return
        self._post(SearchCompleted(generation, query, entries))

    def apply_search_completed(self, event: SearchCompleted, results: ResultList) -> bool:
        """Apply a search completion if its generation is still live."""
        if event.generation != self._generation:
            logger.debug(
                "Discarding stale results for %r (generation %d, live %d)",
                event.query,
                event.generation,
                self._generation,
            )
            return False
        results.set_entries(event.entries)
        self.status = Idle()
        if event.entries:
            self._track_task(self._sink.record_results(event.entries))
        return True

    def apply_search_failed(self, event: SearchFailedEvent) -> bool:
        if event.generation != self._generation:
            logger.debug("Discarding stale failure for %r: %s", event.query, event.message)
            return False
        self.status = SearchFailed(event.message)
        return True

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    def trigger_download(self, entry: ResultEntry) -> bool:
        """Start fetching ``entry``; rejected while another download is in flight."""
        if isinstance(self.download_status, DownloadInFlight):
            logger.info(
                "Download of %s rejected: %s still in flight",
                entry.id,
                self.download_status.entry_id,
            )
            return False
        if entry.download_ref is None:
            return False
        self.download_status = DownloadInFlight(entry.id)
        self._track_task(self._run_download(entry.id, entry.download_ref))
        return True

    async def _run_download(self, entry_id: str, ref: str) -> None:
        def on_progress(received: int, total: int | None) -> None:
            self._post(DownloadProgress(entry_id, received, total))

        version: int | None = None
        arxiv_id = ref
        try:
            path: Path | None = await self._sink.lookup(ref)
            if path is None:
                preprint = await self._fetch.fetch(ref, on_progress=on_progress)
                path = await self._sink.store(preprint)
                arxiv_id, version = preprint.arxiv_id, preprint.version
            else:
                logger.info("Opening %s from the library: %s", ref, path)
            await self._sink.open(path)
        except (DownloadError, LibraryError) as exc:
            self._post(DownloadFailedEvent(entry_id, str(exc)))
            return
        except Exception as exc:
            logger.warning("Download of %s failed unexpectedly", ref, exc_info=True)
            self._post(
                DownloadFailedEvent(
                    entry_id,
                    build_actionable_error(
                        f"download {ref}",
                        why=str(exc) or type(exc).__name__,
                        next_step="press Enter to retry",
                    ),
                )
            )
            return
        self._post(DownloadCompleted(entry_id, path, arxiv_id, version))

    def apply_download_progress(self, event: DownloadProgress) -> bool:
        current = self.download_status
        if not isinstance(current, DownloadInFlight) or current.entry_id != event.entry_id:
            return False
        updated = DownloadInFlight(event.entry_id, event.received, event.total)
        self.download_status = updated
        return updated.percent != current.percent

    def apply_download_completed(self, event: DownloadCompleted) -> bool:
        current = self.download_status
        if not isinstance(current, DownloadInFlight) or current.entry_id != event.entry_id:
            return False
        self.download_status = DownloadDone(event.entry_id, event.path)
        return True

    def apply_download_failed(self, event: DownloadFailedEvent) -> bool:
        current = self.download_status
        if not isinstance(current, DownloadInFlight) or current.entry_id != event.entry_id:
            return False
        self.download_status = DownloadFailed(event.entry_id, event.message)
        return True

    # ------------------------------------------------------------------
    # Task bookkeeping
    # ------------------------------------------------------------------

    def _track_task(self, coro: Any) -> asyncio.Task[None]:
        """Create an asyncio task and track it to prevent garbage collection."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(self._on_task_done)
        return task

    @staticmethod
    def _on_task_done(task: asyncio.Task[None]) -> None:
        """Log unhandled exceptions from background tasks."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unhandled exception in background task: %s", exc, exc_info=exc)

    async def aclose(self) -> None:
        """Stop the debounce timer and cancel outstanding tasks."""
        timer = self._timer
        self._timer = None
        if timer is not None:
            timer.cancel()

        pending = [task for task in self._background_tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            _, still_pending = await asyncio.wait(pending, timeout=TASK_SHUTDOWN_TIMEOUT)
            for task in still_pending:
                logger.debug("Background task did not cancel before shutdown: %r", task)
        self._background_tasks.clear()


__all__ = ["RequestPipeline"]
