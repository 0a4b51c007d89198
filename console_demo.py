"""
Offline console demo: runs both apps against one in-process store.

The admin dashboard and the customer booking form share an
InMemoryDocumentStore, so a booking sent from the customer form shows up
in the admin queue through the same live snapshots the hosted store would
push. No network, no credentials.

Usage:
    python console_demo.py
    python console_demo.py --scenario walkthrough
    python console_demo.py --scenario festival
    python console_demo.py --scenario offline
"""

import argparse
import asyncio
from datetime import datetime
from typing import Optional

from pydantic import ValidationError

from parlourease.apps import AdminDashboard, ClientBookingForm, NotificationCenter, seed_demo_data
from parlourease.booking.state_machine import ACTION_LABELS, BookingAction
from parlourease.config import settings
from parlourease.normalization import local_now
from parlourease.schemas.booking_schema import (
    ClientBookingRequest,
    PaymentMethod,
    PaymentRequest,
    PaymentStatus,
)
from parlourease.schemas.form_errors import field_errors
from parlourease.schemas.service_schema import ServiceCreate
from parlourease.store.memory import InMemoryDocumentStore
from parlourease.utils import format_currency

BLUE = "\033[94m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
DIM = "\033[2m"
RESET = "\033[0m"
BOLD = "\033[1m"

HELP = """Commands:
  queue                         today's queue
  services                      service catalog
  slots                         time slots for today (customer view)
  festival on|off               toggle festival mode
  start N | complete N | pay N  queue actions on row N
  payment AMOUNT METHOD STATUS  save the open payment form (e.g. 85 Cash Paid)
  book NAME;CONTACT;HH:MM;SERVICE[,SERVICE]  book from the customer form
  service NAME;PRICE;DURATION;ICON            add a service
  income                        income overview
  quit"""


class ConsoleSession:
    """Drives the admin dashboard and the customer form side by side."""

    def __init__(self, now: Optional[datetime] = None) -> None:
        self.store = InMemoryDocumentStore()
        self.admin_notifications = NotificationCenter()
        self.client_notifications = NotificationCenter()
        self.admin = AdminDashboard(self.store, self.admin_notifications)
        self.client = ClientBookingForm(self.store, self.client_notifications)
        self._fixed_now = now

    @property
    def now(self) -> datetime:
        return self._fixed_now or local_now()

    def admin_say(self, text: str) -> None:
        print(f"{GREEN}{BOLD}[Admin]{RESET} {GREEN}{text}{RESET}")

    def client_say(self, text: str) -> None:
        print(f"{BLUE}{BOLD}[Client]{RESET} {BLUE}{text}{RESET}")

    def system_log(self, text: str) -> None:
        print(f"{DIM}  >> {text}{RESET}")

    def _flush_notifications(self) -> None:
        for label, center in (("admin", self.admin_notifications), ("client", self.client_notifications)):
            for n in center.active:
                colour = RED if n.is_error else YELLOW
                print(f"{colour}  [{label} toast] {n.title}: {n.description}{RESET}")
            center.clear()

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def open(self, seed: bool = True) -> None:
        if seed:
            await seed_demo_data(self.store, self.now)
        self.admin.start()
        self.client.start()
        self.system_log(f"Live listeners: {self.store.listener_count}")

    def close(self) -> None:
        self.client.close()
        self.admin.close()
        self.system_log(f"Live listeners after close: {self.store.listener_count}")

    # ------------------------------------------------------------------ #
    # Views
    # ------------------------------------------------------------------ #

    def show_queue(self) -> None:
        queue = self.admin.today_queue(self.now)
        if not queue:
            self.admin_say("No bookings for today.")
            return
        symbol = settings.salon.currency_symbol
        for row, entry in enumerate(queue, start=1):
            actions = ", ".join(ACTION_LABELS[a] for a in entry.actions)
            self.admin_say(
                f"{row}. {entry.time_label}  {entry.booking.customer_name:<16} "
                f"{entry.service_names:<28} {format_currency(entry.total_price, symbol):>9}  "
                f"[{entry.status.value}]  {DIM}{actions}{RESET}"
            )

    def show_services(self) -> None:
        symbol = settings.salon.currency_symbol
        for service in self.client.services:
            self.client_say(
                f"{service.glyph.symbol} {service.name:<18} "
                f"{format_currency(service.price, symbol):>9}  {service.duration} min"
            )

    def show_slots(self) -> None:
        self.client.select_date(self.now.date(), self.now)
        slots = self.client.available_time_slots(self.now)
        mode = "festival" if self.client.picker.festival_mode else "regular"
        self.client_say(f"{len(slots)} {mode} slot(s) left today: {' '.join(slots) or '-'}")

    # ------------------------------------------------------------------ #
    # Actions
    # ------------------------------------------------------------------ #

    def _row(self, index: str):
        queue = self.admin.today_queue(self.now)
        try:
            return queue[int(index) - 1]
        except (ValueError, IndexError):
            self.admin_say(f"No queue row '{index}'.")
            return None

    async def queue_action(self, index: str, action: BookingAction) -> None:
        entry = self._row(index)
        if entry is None:
            return
        if action not in entry.actions:
            self.admin_say(f"'{ACTION_LABELS[action]}' is not available for this booking.")
            return
        await self.admin.handle_booking_action(entry.booking.id, action)
        draft = self.admin.dialog.payment_draft
        if draft is not None:
            self.system_log(
                f"Payment form open for {entry.booking.customer_name}: "
                f"amount={draft.amount:.2f} method={draft.method.value if draft.method else '-'} "
                f"status={draft.status.value}"
            )

    async def save_payment(self, amount: str, method: str, status: str) -> None:
        try:
            request = PaymentRequest(
                amount=amount, method=PaymentMethod(method), status=PaymentStatus(status)
            )
        except ValidationError as exc:
            self.admin_say(f"Invalid payment: {field_errors(exc)}")
            return
        except ValueError as exc:
            self.admin_say(f"Invalid payment: {exc}")
            return
        try:
            await self.admin.save_payment(request)
        except RuntimeError as exc:
            self.admin_say(str(exc))

    async def book(self, name: str, contact: str, label: str, service_names: str) -> None:
        wanted = [s.strip().lower() for s in service_names.split(",")]
        ids = [s.id for s in self.client.services if s.name.lower() in wanted]
        try:
            request = ClientBookingRequest(
                customer_name=name,
                contact=contact,
                service_ids=ids,
                appointment_date=self.now.date(),
                appointment_time=label,
            )
        except ValidationError as exc:
            for field_name, message in field_errors(exc).items():
                self.client_say(f"{field_name}: {message}")
            return
        quote = self.client.quote(request.service_ids)
        self.system_log(f"Quote: {quote.names} = {quote.total_price:.2f}")
        await self.client.submit(request, self.now)
        self.client.reset()

    async def add_service(self, name: str, price: str, duration: str, icon: str) -> None:
        try:
            request = ServiceCreate(name=name, price=price, duration=duration, icon=icon)
        except ValidationError as exc:
            self.admin_say(f"Invalid service: {field_errors(exc)}")
            return
        self.admin.open_add_service()
        await self.admin.save_service(request)

    # ------------------------------------------------------------------ #
    # Scenarios
    # ------------------------------------------------------------------ #

    SCENARIOS: dict[str, list[str]] = {
        "walkthrough": [
            "services",
            "queue",
            "book Maya Patel;9876543210;17:30;Haircut & Style,Manicure",
            "queue",
            "start 4",
            "complete 4",
            "payment 85 Cash Paid",
            "complete 2",
            "payment 35 UPI Paid",
            "start 1",
            "queue",
            "income",
        ],
        "festival": [
            "slots",
            "festival on",
            "slots",
            "festival off",
        ],
        "offline": [
            "queue",
            "!offline",
            "start 1",
            "!online",
            "start 1",
            "queue",
        ],
    }

    async def handle(self, line: str) -> bool:
        """Run one command line. Returns False when the session should end."""
        command, _, rest = line.strip().partition(" ")
        command = command.lower()
        args = rest.split()

        if command in ("quit", "exit", "q"):
            return False
        if command == "help":
            print(HELP)
        elif command == "queue":
            self.show_queue()
        elif command == "services":
            self.show_services()
        elif command == "slots":
            self.show_slots()
        elif command == "festival" and args:
            enabled = args[0].lower() == "on"
            self.admin.set_festival_mode(enabled)
            self.client.picker.set_festival_mode(enabled)
            self.admin_say(f"Festival mode {'on' if enabled else 'off'}: {len(self.admin.time_slots())} slots")
        elif command in ("start", "complete", "pay") and args:
            action = {
                "start": BookingAction.START,
                "complete": BookingAction.COMPLETE,
                "pay": BookingAction.MANAGE_PAYMENT,
            }[command]
            await self.queue_action(args[0], action)
        elif command == "payment" and len(args) == 3:
            await self.save_payment(*args)
        elif command == "book" and rest.count(";") == 3:
            await self.book(*(part.strip() for part in rest.split(";")))
        elif command == "service" and rest.count(";") == 3:
            await self.add_service(*(part.strip() for part in rest.split(";")))
        elif command == "income":
            print(self.admin.income_report(self.now))
        elif command == "!offline":
            self.store.fail_writes = True
            self.system_log("Store is now rejecting writes")
        elif command == "!online":
            self.store.fail_writes = False
            self.system_log("Store is accepting writes again")
        else:
            print(f"{RED}Unknown command: {line}{RESET}  (type 'help')")
        self._flush_notifications()
        return True

    async def run_scenario(self, scenario: str) -> None:
        """Auto-play a pre-scripted scenario for demo purposes."""
        steps = self.SCENARIOS.get(scenario)
        if not steps:
            print(f"{RED}Unknown scenario: {scenario}{RESET}")
            return

        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  PARLOUREASE - Scenario: {scenario}{RESET}")
        print(f"{BOLD}  Salon: {settings.salon.name}{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        await self.open()
        try:
            for step in steps:
                print(f"\n{YELLOW}$ {step}{RESET}")
                await self.handle(step)
        finally:
            self.close()

        print(f"\n{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  Scenario '{scenario}' complete.{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

    async def run(self) -> None:
        print()
        print(f"{BOLD}{'=' * 60}{RESET}")
        print(f"{BOLD}  PARLOUREASE - Console Demo{RESET}")
        print(f"{BOLD}  Salon: {settings.salon.name}{RESET}")
        print(f"{BOLD}  Type 'help' for commands, 'quit' to exit{RESET}")
        print(f"{BOLD}{'=' * 60}{RESET}")

        await self.open()
        try:
            while True:
                line = input(f"\n{BOLD}parlourease> {RESET}").strip()
                if not line:
                    continue
                if not await self.handle(line):
                    break
        except (EOFError, KeyboardInterrupt):
            print()
        finally:
            self.close()
        print(f"{DIM}Session ended.{RESET}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Offline console demo")
    parser.add_argument(
        "--scenario",
        choices=sorted(ConsoleSession.SCENARIOS),
        default=None,
        help="Auto-play a pre-scripted scenario instead of interactive mode",
    )
    parser.add_argument(
        "--at",
        default=None,
        help="Pretend the current time is this ISO timestamp (e.g. 2026-03-15T12:00)",
    )
    args = parser.parse_args(argv)

    if args.at:
        now = datetime.fromisoformat(args.at).astimezone()
    elif args.scenario:
        # Scripted runs happen at midday so the afternoon slots are still open.
        now = local_now().replace(hour=12, minute=0, second=0, microsecond=0)
    else:
        now = None
    session = ConsoleSession(now=now)
    if args.scenario:
        asyncio.run(session.run_scenario(args.scenario))
    else:
        asyncio.run(session.run())


if __name__ == "__main__":
    main()
