"""Shared fixtures: a virtual-time loop and a small product catalog."""
from __future__ import annotations

import heapq
import itertools

import pytest

from storefront.models import Product


class FakeTimerHandle:
    def __init__(self, when: float, callback, args) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeLoop:
    """Just enough of an event loop for ``call_later``, driven by ``advance``."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list = []
        self._seq = itertools.count()

    def time(self) -> float:
        return self.now

    def call_later(self, delay: float, callback, *args) -> FakeTimerHandle:
        handle = FakeTimerHandle(self.now + delay, callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    @property
    def armed(self) -> int:
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def advance(self, ms: float) -> None:
        target = self.now + ms / 1000
        while self._queue and self._queue[0][0] <= target + 1e-9:
            when, _, handle = heapq.heappop(self._queue)
            self.now = when
            if not handle.cancelled:
                handle.callback(*handle.args)
        self.now = target


@pytest.fixture
def fake_loop():
    return FakeLoop()


@pytest.fixture
def products():
    return [
        Product(_id="v4sLtEcMpzabRyfx", name="iPhone XR", category="Phones", cost=100, rating=4, image="https://i.imgur.com/lulqWzW.jpg"),
        Product(_id="upLK9JbQ4rMhTwt4", name="Basketball", category="Sports", cost=100, rating=5, image="https://i.imgur.com/lulqWzW.jpg"),
        Product(_id="a4sLtEcMpzabRyfx", name="Smart Phone Tripod Stand", category="Electronics", cost=25, rating=4, image="https://i.imgur.com/tripod.png"),
        Product(_id="Lm9tQ2xVb7nR4sKp", name="Crème Brûlée Torch", category="Home & Kitchen", cost=35, rating=4, image="https://i.imgur.com/torch.png"),
    ]


@pytest.fixture
def product_records(products):
    return [product.model_dump(by_alias=True) for product in products]
