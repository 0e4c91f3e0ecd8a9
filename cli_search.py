"""Terminal client that drives the products page search flow."""
from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from storefront.catalog_client import build_catalog_client
from storefront.config import Settings, configure_logging, settings
from storefront.controller import SearchController
from storefront.sink import CatalogState

MAX_RESULTS = 50
GREEN = "\033[92m"
RED = "\033[91m"
RESET = "\033[0m"


def pretty_print_state(state: CatalogState) -> None:
    if state.loading:
        return
    if state.error is not None:
        print(f"{RED}#{state.latest_request} {state.error.value}: {state.message}{RESET}")
        return
    print(f"{GREEN}#{state.latest_request} results: {len(state.products)}{RESET}")
    if state.show_empty:
        print("  No products found")
    for idx, product in enumerate(state.products[:MAX_RESULTS], start=1):
        print(
            f"  {idx:02d}. {product.name} | {product.category} | "
            f"{product.cost:.2f} | {'*' * product.rating}"
        )


def parse_replay_line(line: str) -> Optional[Tuple[int, str]]:
    """Parse ``<offset_ms> <text>``; the text may be empty."""
    stripped = line.rstrip("\n")
    if not stripped.strip() or stripped.lstrip().startswith("#"):
        return None
    offset, _, text = stripped.strip().partition(" ")
    return int(offset), text


def load_replay(file_path: Path) -> List[Tuple[int, str]]:
    with file_path.open("r", encoding="utf-8") as fh:
        events = [event for event in (parse_replay_line(line) for line in fh) if event is not None]
    return sorted(events, key=lambda event: event[0])


async def settle(controller: SearchController) -> None:
    while controller.scheduler.pending or controller.in_flight:
        await asyncio.sleep(0.01)
        await controller.wait_idle()


async def replay(controller: SearchController, events: Iterable[Tuple[int, str]]) -> None:
    loop = asyncio.get_running_loop()
    started = loop.time()
    for offset_ms, text in events:
        await asyncio.sleep(max(0.0, started + offset_ms / 1000 - loop.time()))
        print(f"[{offset_ms:>5} ms] typed {text!r}")
        controller.on_input(text)
    await settle(controller)


async def interactive_shell(controller: SearchController) -> None:
    print("Interactive product search. Each line is typed into the search box; 'exit' quits.")
    await controller.load()
    while True:
        try:
            text = await asyncio.to_thread(input, "> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if text.strip().lower() in {"exit", "quit"}:
            break
        controller.on_input(text)
        await settle(controller)


async def run(args: argparse.Namespace, config: Settings) -> int:
    state = CatalogState(listener=pretty_print_state)
    async with SearchController(build_catalog_client(config), state, config.debounce_delay_ms) as controller:
        if args.replay:
            await replay(controller, load_replay(args.replay))
        elif args.all:
            await controller.load()
        elif args.query is not None:
            await controller.search(args.query)
        else:
            await interactive_shell(controller)
    return 1 if state.error is not None else 0


def main(argv: Iterable[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="CLI client for the storefront catalog")
    parser.add_argument("query", nargs="?", help="Search once for this text. If omitted, starts REPL mode.")
    parser.add_argument("--all", action="store_true", help="List the whole catalog")
    parser.add_argument("--replay", type=Path, help="File of '<offset_ms> <text>' keystrokes to replay")
    parser.add_argument("--endpoint", help="Catalog base URL (default: $CATALOG_ENDPOINT)")
    parser.add_argument("--delay-ms", type=int, help="Debounce delay in milliseconds")
    parser.add_argument("--cache", action="store_true", help="Cache catalog responses")
    parser.add_argument("--log-level", default=settings.log_level)
    args = parser.parse_args(list(argv) if argv is not None else None)

    configure_logging(args.log_level)
    config = settings
    if args.endpoint:
        config = replace(config, catalog_endpoint=args.endpoint)
    if args.delay_ms is not None:
        config = replace(config, debounce_delay_ms=args.delay_ms)
    if args.cache:
        config = replace(config, cache_enabled=True)
    return asyncio.run(run(args, config))


if __name__ == "__main__":
    raise SystemExit(main())
