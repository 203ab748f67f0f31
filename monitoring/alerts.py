"""
============================================================================
HOSTWATCH - ALERT CHANNELS
============================================================================
An alert channel has one capability: ``send(title, message, priority)``.

PushoverChannel
    Posts the alert to the Pushover messages API with a bounded timeout.
    Any failure (transport error, non-JSON reply, ``status`` other than 1)
    becomes a NotificationError that is logged and swallowed. Alerts are
    never retried and never break the caller's flow.

LogChannel
    Local development: logs the payload that would have been sent and
    returns without touching the network.

``create_alert_channel`` picks one from the settings.
============================================================================
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from config.constants import AlertKind, AlertPriority, Defaults
from config.settings import PushoverSettings, Settings
from exceptions import (
    ConfigurationError,
    NotificationDeliveryError,
    NotificationError,
    NotificationRejectedError,
)
from utils.helpers import StringHelper
from utils.logger import get_logger


logger = get_logger("Alerts")


# ============================================================================
# ALERT PAYLOAD
# ============================================================================

@dataclass
class AlertPayload:
    """
    A formatted alert ready to hand to a channel.
    """
    kind: AlertKind
    hostname: str
    title: str
    message: str
    priority: AlertPriority = AlertPriority.NORMAL
    metadata: Dict[str, Any] = field(default_factory=dict)


# ============================================================================
# CHANNEL INTERFACE
# ============================================================================

class AlertChannel(ABC):
    """Best-effort delivery of a titled message."""

    name = "base"

    @abstractmethod
    async def send(
        self,
        title: str,
        message: str,
        priority: AlertPriority = AlertPriority.NORMAL,
    ) -> bool:
        """
        Deliver one alert.

        Returns
        -------
        bool
            True if the alert was accepted. Failures are logged by the
            channel and reported as False, never raised.
        """

    async def dispatch(self, payload: AlertPayload) -> bool:
        """Send a prepared payload."""
        return await self.send(payload.title, payload.message, payload.priority)


# ============================================================================
# LOCAL CHANNEL
# ============================================================================

class LogChannel(AlertChannel):
    """Writes alerts to the log instead of delivering them."""

    name = "log"

    async def send(
        self,
        title: str,
        message: str,
        priority: AlertPriority = AlertPriority.NORMAL,
    ) -> bool:
        payload = {"title": title, "message": message, "priority": int(priority)}
        logger.info(f"Pushover message generated: {json.dumps(payload)}")
        return True


# ============================================================================
# PUSHOVER CHANNEL
# ============================================================================

class PushoverChannel(AlertChannel):
    """
    Pushover API channel.

    Parameters
    ----------
    settings : PushoverSettings
        Credentials, endpoint and timeout.
    client : httpx.AsyncClient | None
        Shared client. When None a short-lived client is opened per send.
    """

    name = "pushover"

    def __init__(self, settings: PushoverSettings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._client = client
        self._timeout = httpx.Timeout(settings.timeout)

    def _build_form(self, title: str, message: str, priority: AlertPriority) -> Dict[str, str]:
        return {
            "token": self.settings.apptoken.get_secret_value(),
            "user": self.settings.userkey.get_secret_value(),
            "title": StringHelper.truncate(title, Defaults.PUSHOVER_TITLE_LIMIT),
            "message": StringHelper.truncate(message, Defaults.PUSHOVER_MESSAGE_LIMIT),
            "priority": str(int(priority)),
        }

    async def _post(self, form: Dict[str, str]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self.settings.api_url, data=form, timeout=self._timeout)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(self.settings.api_url, data=form)

    async def _deliver(self, title: str, message: str, priority: AlertPriority) -> None:
        """
        Post one message and check the acknowledgement.

        Raises:
            NotificationDeliveryError: Transport failure or unreadable reply
            NotificationRejectedError: Pushover did not return status 1
        """
        try:
            response = await self._post(self._build_form(title, message, priority))
        except httpx.TimeoutException as e:
            raise NotificationDeliveryError(
                f"Pushover request timed out after {self.settings.timeout}s",
                channel=self.name,
                title=title,
                cause=e,
            ) from e
        except httpx.HTTPError as e:
            raise NotificationDeliveryError(
                f"Pushover request failed: {e}",
                channel=self.name,
                title=title,
                cause=e,
            ) from e

        try:
            body = response.json()
        except ValueError as e:
            raise NotificationDeliveryError(
                f"Pushover returned a non-JSON response (HTTP {response.status_code})",
                channel=self.name,
                title=title,
                cause=e,
            ) from e

        if not isinstance(body, dict) or body.get("status") != 1:
            errors = body.get("errors") if isinstance(body, dict) else body
            raise NotificationRejectedError(
                channel=self.name,
                title=title,
                status_code=response.status_code,
                response=errors,
            )

    async def send(
        self,
        title: str,
        message: str,
        priority: AlertPriority = AlertPriority.NORMAL,
    ) -> bool:
        try:
            await self._deliver(title, message, priority)
        except NotificationError as e:
            logger.error(f"Pushover failed: {e.log_format()}")
            return False

        logger.debug(f"Pushover accepted '{title}'")
        return True


# ============================================================================
# FACTORY
# ============================================================================

def create_alert_channel(
    settings: Settings,
    client: Optional[httpx.AsyncClient] = None,
) -> AlertChannel:
    """
    Pick the alert channel for these settings.

    Raises:
        ConfigurationError: Real delivery is requested but Pushover
            credentials are missing
    """
    if settings.local_dev:
        logger.info("Local development mode: alerts are logged, not sent")
        return LogChannel()

    if not settings.pushover.is_configured:
        raise ConfigurationError(
            "Pushover credentials are not set (PO_APPTOKEN / PO_USERKEY)",
            config_key="pushover",
        )

    return PushoverChannel(settings.pushover, client=client)
