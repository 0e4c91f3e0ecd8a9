"""Products page search flow.

keystroke -> :class:`SearchScheduler` -> :class:`CatalogClient` -> :class:`ResultSink`
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Coroutine, List, Optional, Set

from .catalog_client import CatalogClient
from .errors import GENERIC_SERVER_MESSAGE, CatalogError, ServerError
from .models import Product
from .scheduler import DEFAULT_DEBOUNCE_DELAY_MS, SearchScheduler
from .sink import ResultSink

logger = logging.getLogger(__name__)


class SearchController:
    def __init__(
        self,
        client: CatalogClient,
        sink: ResultSink,
        debounce_delay_ms: int = DEFAULT_DEBOUNCE_DELAY_MS,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self.client = client
        self.sink = sink
        self.scheduler = SearchScheduler(self._search_later, debounce_delay_ms, loop=loop)
        self._loop = loop
        self._request_id = 0
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def load(self) -> Optional[List[Product]]:
        """Fetch the unfiltered catalog for the initial page render."""
        return await self._spawn(self._run(self.client.list_all, "<all>"))

    def on_input(self, text: str) -> None:
        if self._closed:
            raise RuntimeError("SearchController is closed")
        self.scheduler.on_input(text)

    async def search(self, text: str) -> Optional[List[Product]]:
        """Search right away, bypassing the debounce."""
        return await self._spawn(self._run(lambda: self.client.search(text), text))

    def _search_later(self, text: str) -> None:
        self._spawn(self._run(lambda: self.client.search(text), text))

    def _spawn(self, coro: Coroutine[Any, Any, Optional[List[Product]]]) -> asyncio.Task:
        # Every request runs as a tracked task so teardown can cancel it
        # before the client is closed.
        if self._closed:
            coro.close()
            raise RuntimeError("SearchController is closed")
        loop = self._loop or asyncio.get_running_loop()
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, fetch: Callable[[], Awaitable[List[Product]]], label: str) -> Optional[List[Product]]:
        self._request_id += 1
        request_id = self._request_id
        logger.info("request %s q=%r", request_id, label)
        self.sink.on_loading(request_id)
        try:
            products = await fetch()
        except CatalogError as exc:
            self.sink.on_error(request_id, exc)
            return None
        except Exception:
            logger.exception("request %s q=%r failed unexpectedly", request_id, label)
            self.sink.on_error(request_id, ServerError(GENERIC_SERVER_MESSAGE))
            return None
        logger.info("request %s q=%r hits=%s", request_id, label, len(products))
        self.sink.on_success(request_id, products)
        return products

    async def wait_idle(self) -> None:
        """Wait for searches already issued to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.scheduler.reset()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        await self.client.aclose()

    async def __aenter__(self) -> "SearchController":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
