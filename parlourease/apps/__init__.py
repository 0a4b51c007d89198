from parlourease.apps.admin_dashboard import AdminDashboard, DialogMode, DialogState, QueueEntry
from parlourease.apps.client_booking import ClientBookingForm
from parlourease.apps.notifications import Notification, NotificationCenter, NotificationVariant
from parlourease.apps.registry import create_app, get_registered_apps, register_app
from parlourease.apps.seed import (
    add_demo_booking_once,
    add_demo_service_once,
    seed_demo_data,
    seed_initial_data,
)

__all__ = [
    "AdminDashboard",
    "ClientBookingForm",
    "DialogMode",
    "DialogState",
    "QueueEntry",
    "Notification",
    "NotificationCenter",
    "NotificationVariant",
    "create_app",
    "register_app",
    "get_registered_apps",
    "seed_initial_data",
    "add_demo_service_once",
    "add_demo_booking_once",
    "seed_demo_data",
]
