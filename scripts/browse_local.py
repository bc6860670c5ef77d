#!/usr/bin/env python3
"""
Interactive local menu browser (no HTTP).

Usage:
  python3 scripts/browse_local.py

What it does:
- Starts a MenuSession with the same wiring as the API (catalog load + cart restore)
- Lets you filter, search and edit the cart from the prompt
- Keeps the catalog fresh in the background when CATALOG_FEED=polling
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from menucart.application.exceptions import CartPersistenceError, CatalogFetchError
from menucart.application.use_cases.catalog_view import format_price
from menucart.application.use_cases.menu_session import MenuSession
from menucart.domain.entities.catalog_view import CatalogViewResult
from menucart.main import configure_logging
from menucart.wiring.dependencies import build_session

HELP = """Commands:
  /cat <name>     -> filter by category (/cat Semua for all)
  /search <text>  -> search by name or category
  /clear          -> clear search
  +<id> / -<id>   -> add to / remove from cart
  /cart           -> show cart
  /refresh        -> reload catalog
  /quit           -> exit"""


def _print_view(session: MenuSession, view: CatalogViewResult) -> None:
    print("\n" + "-" * 60)
    if view.show_category_filter:
        print("Kategori: " + " | ".join(
            f"[{c}]" if c == view.category else c for c in session.categories
        ))
    if view.is_searching:
        print(f'Ditemukan {view.result_count} menu untuk "{view.search_text}"')
    for item in view.items:
        qty = session.cart.quantity(item.id)
        marker = f"  x{qty}" if qty else ""
        print(f"  #{item.id:<4} {item.name:<28} {item.category:<14} {format_price(item.price)}{marker}")
    if view.empty_message:
        print(f"  ({view.empty_message})")
    if view.suggestions:
        print("Pencarian populer: " + ", ".join(view.suggestions))
    print(f"Keranjang: {session.cart_count()} item")


def _parse_item_id(text: str) -> int | None:
    try:
        return int(text)
    except ValueError:
        return None


async def main() -> None:
    configure_logging()
    session = build_session()
    await session.start()
    if session.startup_error:
        print(f"Catalog unavailable: {session.startup_error}")
    print(HELP)
    _print_view(session, session.view())

    try:
        while True:
            try:
                user_text = (await asyncio.to_thread(input, "\n> ")).strip()
            except (EOFError, KeyboardInterrupt):
                print("\nBye!")
                return

            if not user_text:
                _print_view(session, session.view())
                continue

            cmd, _, arg = user_text.partition(" ")
            cmd = cmd.lower()
            try:
                if cmd in ("/quit", "/exit"):
                    print("Bye!")
                    return
                if cmd == "/help":
                    print(HELP)
                    continue
                if cmd == "/cat":
                    _print_view(session, session.set_category(arg.strip() or session.categories[0]))
                elif cmd == "/search":
                    _print_view(session, session.set_search(arg))
                elif cmd == "/clear":
                    _print_view(session, session.clear_search())
                elif cmd == "/cart":
                    names = {item.id: item.name for item in session.mirror.snapshot}
                    for item_id, qty in sorted(session.cart.items().items()):
                        print(f"  {names.get(item_id, f'#{item_id} (not on menu)')}: {qty}")
                    print(f"Total: {session.cart_count()}")
                elif cmd == "/refresh":
                    await session.refresh()
                    _print_view(session, session.view())
                elif user_text[0] in "+-" and _parse_item_id(user_text[1:]) is not None:
                    item_id = int(user_text[1:])
                    if user_text[0] == "+":
                        qty = session.add_to_cart(item_id)
                    else:
                        qty = session.remove_from_cart(item_id)
                    print(f"#{item_id}: {qty} (total {session.cart_count()})")
                else:
                    print("Unknown command. /help for commands.")
            except ValueError as e:
                print(f"ERROR: {e}")
            except (CatalogFetchError, CartPersistenceError) as e:
                print(f"ERROR: {e}")
    finally:
        await session.aclose()


if __name__ == "__main__":
    asyncio.run(main())
