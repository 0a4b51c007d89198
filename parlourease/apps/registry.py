"""
App registry: builds either client by name.

``main.py`` and the console demo pick the app from the command line, so
both controllers are registered here under the names used on the command
line and in log records.
"""

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

_APP_REGISTRY: dict[str, Callable[..., Any]] = {}


def register_app(name: str, factory: Callable[..., Any]) -> None:
    """Register an app factory by name."""
    _APP_REGISTRY[name] = factory
    logger.debug("App registered: %s", name)


def create_app(name: str, **kwargs: Any) -> Any:
    """Create an app controller by registered name.

    Raises:
        KeyError: If the app name is not registered.
    """
    if name not in _APP_REGISTRY:
        registered = list(_APP_REGISTRY.keys())
        raise KeyError(f"App '{name}' not registered. Available: {registered}")
    return _APP_REGISTRY[name](**kwargs)


def get_registered_apps() -> list[str]:
    """Return names of all registered apps."""
    return list(_APP_REGISTRY.keys())


def _auto_register() -> None:
    from parlourease.apps.admin_dashboard import AdminDashboard
    from parlourease.apps.client_booking import ClientBookingForm

    register_app("admin", AdminDashboard)
    register_app("client", ClientBookingForm)


_auto_register()
