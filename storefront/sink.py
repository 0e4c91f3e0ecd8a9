"""Display state for the products page."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol

from .errors import CatalogError, ErrorKind
from .models import Product

logger = logging.getLogger(__name__)


class ResultSink(Protocol):
    """Receives the outcome of each catalog request.

    Every ``on_loading(request_id)`` is followed by exactly one
    ``on_success`` or ``on_error`` for the same id. Ids increase
    monotonically in issue order, but completions may arrive in any order.

    Teardown ends the guarantee: a request still in flight when
    ``SearchController.aclose`` runs is cancelled and gets no terminal signal.
    """

    def on_loading(self, request_id: int) -> None: ...

    def on_success(self, request_id: int, products: List[Product]) -> None: ...

    def on_error(self, request_id: int, error: CatalogError) -> None: ...


@dataclass
class CatalogState:
    """What the products grid should show right now.

    Only the most recently issued request may change the grid. A completion
    for an older request is counted in ``discarded`` and otherwise ignored,
    so a slow response can never overwrite a newer one.
    """

    listener: Optional[Callable[["CatalogState"], None]] = None
    loading: bool = False
    products: List[Product] = field(default_factory=list)
    error: Optional[ErrorKind] = None
    message: Optional[str] = None
    latest_request: int = 0
    discarded: int = 0

    @property
    def show_empty(self) -> bool:
        """True when the page should render its "No products found" indicator."""
        return not self.loading and (self.error is not None or not self.products)

    def on_loading(self, request_id: int) -> None:
        if request_id < self.latest_request:
            return
        self.latest_request = request_id
        self.loading = True
        self._changed()

    def on_success(self, request_id: int, products: List[Product]) -> None:
        if self._is_stale(request_id):
            return
        self.loading = False
        self.error = None
        self.message = None
        self.products = list(products)
        self._changed()

    def on_error(self, request_id: int, error: CatalogError) -> None:
        if self._is_stale(request_id):
            return
        logger.warning("catalog request %s failed (%s): %s", request_id, error.kind.value, error.message)
        self.loading = False
        self.error = error.kind
        self.message = error.message
        self.products = []
        self._changed()

    def _is_stale(self, request_id: int) -> bool:
        if request_id == self.latest_request:
            return False
        self.discarded += 1
        logger.debug("discarding stale completion %s (latest=%s)", request_id, self.latest_request)
        return True

    def _changed(self) -> None:
        if self.listener is not None:
            self.listener(self)
