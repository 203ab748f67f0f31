"""
============================================================================
HOSTWATCH - CHECK-IN HANDLER
============================================================================
Called every time a monitored host reports in.

1.  Reject a missing key (ClientError) before touching the store.
2.  Look the host up; an unknown key is a HostNotFoundError and nothing
    is written.
3.  If the host was offline, clear the flag with a compare-and-set on
    ``disconnected = True`` together with the new check-in time. Only the
    writer that wins the compare-and-set sends the recovery alert, so a
    sweep recovering the same host at the same moment cannot cause a
    second one.
4.  Otherwise write the new check-in time on its own.

Store failures propagate as StoreError; the HTTP layer turns them into a
500. Alert delivery failures never propagate.
============================================================================
"""

from dataclasses import dataclass
from typing import Callable, Optional

from database.models import HostRecord
from database.repositories import HostStore
from exceptions import HostNotFoundError, MissingHostKeyError
from monitoring.alerts import AlertChannel
from monitoring.messages import build_recovery_alert
from monitoring.policy import MonitorConfig
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("Checkin")


@dataclass(frozen=True)
class CheckinResult:
    """
    Outcome of one check-in.

    Attributes
    ----------
    host : HostRecord          — the record as written
    recovered : bool           — True if this check-in cleared the offline flag
    offline_for : int | None   — seconds the host was offline, when recovered
    """
    host: HostRecord
    recovered: bool = False
    offline_for: Optional[int] = None


class CheckinHandler:
    """
    Records check-ins and detects recovery.

    Parameters
    ----------
    store : HostStore
    alert_channel : AlertChannel
    config : MonitorConfig
    clock : Callable[[], int]
        Returns the current epoch seconds.
    """

    def __init__(
        self,
        store: HostStore,
        alert_channel: AlertChannel,
        config: MonitorConfig,
        clock: Callable[[], int] = TimeHelper.now_epoch,
    ):
        self.store = store
        self.alert_channel = alert_channel
        self.config = config
        self.clock = clock

    async def handle(self, host_key: Optional[str]) -> CheckinResult:
        """
        Record a check-in for ``host_key``.

        Raises:
            MissingHostKeyError: No key supplied
            HostNotFoundError: No host has this key
            StoreError: The store could not be read or written
        """
        if not host_key:
            raise MissingHostKeyError()

        host = await self.store.read_one(host_key)
        if host is None:
            logger.warning("Check-in with unknown host key rejected")
            raise HostNotFoundError(host_key=host_key)

        now = self.clock()
        recovered = False
        offline_for = None

        if host.disconnected and self.config.recover_on_checkin:
            offline_for = host.elapsed(now)
            recovered = await self.store.update(
                host_key,
                {"last_checkin": now, "disconnected": False},
                expected_disconnected=True,
            )
            if not recovered:
                logger.info(f"'{host.hostname}' was already marked online by another update.")

        if not recovered:
            written = await self.store.update(host_key, {"last_checkin": now})
            if not written:
                # Host removed between the read and the write
                raise HostNotFoundError(host_key=host_key)

        updated = host.with_changes(
            last_checkin=now,
            disconnected=host.disconnected and not self.config.recover_on_checkin,
        )

        if recovered:
            logger.info(
                f"'{host.hostname}' checked in and has recovered from "
                f"disconnection after {offline_for}s."
            )
            await self.alert_channel.dispatch(build_recovery_alert(host, offline_for))
            return CheckinResult(host=updated, recovered=True, offline_for=offline_for)

        logger.debug(f"'{host.hostname}' checked in.")
        return CheckinResult(host=updated)
