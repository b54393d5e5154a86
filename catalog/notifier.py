"""
catalog/notifier.py -- Outbound notifications for order status changes.

After an order's status is patched, the API hands (order id, new status) to a
ChangeNotifier. Delivery is fire-and-forget: dispatch_status_change() is run
as a background task after the response is sent, and a failed delivery is
logged and dropped. It never fails the request and is never retried.

Dropped notifications are only visible in the logs. Alert on WARNING records
from the "lampshop.notifier" logger to catch them.

Implementations:
  LoggingChangeNotifier -- default when NOTIFY_URL is unset; logs the change.
  HttpChangeNotifier    -- POSTs {"orderId": ..., "status": ...} to NOTIFY_URL.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import requests

from catalog.models import OrderStatus

logger = logging.getLogger("lampshop.notifier")


class NotificationError(Exception):
    """A status change could not be delivered to the downstream system."""


class ChangeNotifier(Protocol):
    def notify_order_status_change(self, order_id: int, status: OrderStatus) -> None:
        """Deliver one status change. Raise NotificationError on failure."""
        ...


class LoggingChangeNotifier:
    def notify_order_status_change(self, order_id: int, status: OrderStatus) -> None:
        logger.info("Order %d status changed to %s", order_id, status.value)


class HttpChangeNotifier:
    """Deliver status changes as JSON POSTs to a single webhook URL.

    One requests.Session per notifier for connection pooling. Redirects are
    capped at 3; the endpoint is configured, not user supplied.
    """

    def __init__(self, url: str, timeout: float = 5.0, session: Optional[requests.Session] = None) -> None:
        self.url = url
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.max_redirects = 3

    def notify_order_status_change(self, order_id: int, status: OrderStatus) -> None:
        try:
            resp = self._session.post(
                self.url,
                json={"orderId": order_id, "status": status.value},
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            raise NotificationError(f"status change for order {order_id} not delivered: {e}") from e

    def close(self) -> None:
        self._session.close()


def build_notifier(url: str, timeout: float = 5.0) -> ChangeNotifier:
    """Pick the notifier for the configured NOTIFY_URL (empty = log only)."""
    if url:
        return HttpChangeNotifier(url, timeout=timeout)
    return LoggingChangeNotifier()


def dispatch_status_change(notifier: ChangeNotifier, order_id: int, status: OrderStatus) -> None:
    """Deliver a status change, logging instead of raising on failure.

    Runs after the HTTP response is sent, so there is no caller left to
    report to. Any exception from a notifier, not just NotificationError, is
    logged here so a buggy notifier cannot crash the background task runner.
    """
    try:
        notifier.notify_order_status_change(order_id, status)
    except NotificationError as e:
        logger.warning("Dropped order status notification: %s", e)
    except Exception:
        logger.exception("Notifier raised unexpectedly for order %d", order_id)
