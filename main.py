"""
ParlourEase entry point.

Runs one of the two apps in the terminal against an in-process store, or
the combined demo with both apps sharing the same store.

Usage:
    Admin dashboard:  python main.py admin
    Booking form:     python main.py client
    Both (demo):      python main.py demo
"""

import asyncio
import logging
import sys

from parlourease.apps import create_app, get_registered_apps, seed_demo_data
from parlourease.config import settings
from parlourease.normalization import local_now
from parlourease.store.memory import InMemoryDocumentStore

logger = logging.getLogger(__name__)


async def _run_single_app(name: str) -> None:
    """Start one app, print what it shows on first render, and shut it down."""
    store = InMemoryDocumentStore()
    await seed_demo_data(store)
    app = create_app(name, store=store)
    now = local_now()
    with app:
        if name == "admin":
            queue = app.today_queue(now)
            print(f"{settings.salon.name} admin: {len(queue)} booking(s) today")
            for entry in queue:
                print(f"  {entry.time_label}  {entry.booking.customer_name}  "
                      f"{entry.service_names}  [{entry.status.value}]")
            print(app.income_report(now))
        else:
            app.select_date(now.date(), now)
            print(f"{settings.salon.name} booking form: {len(app.services)} service(s)")
            for service in app.services:
                print(f"  {service.glyph.symbol} {service.name}")
            print(f"  Slots left today: {', '.join(app.available_time_slots(now)) or 'none'}")
    logger.info("%s app closed (%d listener(s) left)", name, store.listener_count)


def _run_demo_mode() -> None:
    """Start the offline console demo with both apps."""
    from console_demo import main as console_main

    console_main(sys.argv[2:])


if __name__ == "__main__":
    mode = sys.argv[1] if len(sys.argv) > 1 else "demo"
    if mode == "demo":
        _run_demo_mode()
    elif mode in get_registered_apps():
        asyncio.run(_run_single_app(mode))
    else:
        print(f"Usage: python main.py [{'|'.join(get_registered_apps())}|demo]")
        sys.exit(2)
