"""
============================================================================
HOSTWATCH - SWEEP EVALUATOR
============================================================================
Runs on every scheduled trigger. Lists all hosts and, one host at a time,
applies the threshold policy:

    online  + overdue         -> mark offline, send offline alert
    offline + recovered       -> mark online,  send recovery alert
    anything else             -> log and move on

Each flag change is written with a compare-and-set on the value that was
read, and the alert only goes out once that write succeeded. If another
update got there first the host is skipped without an alert.

Failure handling
----------------
* Listing hosts fails  -> error logged, nothing written, no alerts.
* A write fails        -> error logged, the rest of this cycle is aborted.
  The next cycle picks the remaining hosts up again.
============================================================================
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from database.models import HostRecord
from database.repositories import HostStore
from exceptions import StoreError
from monitoring.alerts import AlertChannel
from monitoring.messages import build_offline_alert, build_recovery_alert
from monitoring.policy import MonitorConfig, Transition, evaluate_transition
from utils.helpers import TimeHelper
from utils.logger import get_logger


logger = get_logger("Sweep")


# ============================================================================
# EVENT & REPORT
# ============================================================================

@dataclass(frozen=True)
class ScheduledEvent:
    """
    Trigger for one sweep cycle.

    Attributes
    ----------
    scheduled_time : float   — nominal trigger time, epoch seconds
    source : str             — what fired it ("scheduler", "cli", "http")
    """
    scheduled_time: float = field(default_factory=time.time)
    source: str = "scheduler"


@dataclass
class SweepReport:
    """
    Observations from one sweep cycle.
    """
    scheduled_time: float
    checked: int = 0
    went_offline: List[str] = field(default_factory=list)
    recovered: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    aborted: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def transitions(self) -> int:
        return len(self.went_offline) + len(self.recovered)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scheduled_time": self.scheduled_time,
            "checked": self.checked,
            "went_offline": list(self.went_offline),
            "recovered": list(self.recovered),
            "skipped": list(self.skipped),
            "aborted": self.aborted,
            "error": self.error,
        }


# ============================================================================
# SWEEP EVALUATOR
# ============================================================================

class SweepEvaluator:
    """
    Evaluates every host against the threshold policy.

    Parameters
    ----------
    store : HostStore
    alert_channel : AlertChannel
    config : MonitorConfig
    clock : Callable[[], int]
        Returns the current epoch seconds; sampled once per host.
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

    async def run(self, event: Optional[ScheduledEvent] = None) -> SweepReport:
        """
        Run one sweep cycle.

        Never raises for store failures; they are recorded on the report.
        """
        event = event or ScheduledEvent(source="manual")
        report = SweepReport(scheduled_time=event.scheduled_time)
        time_of_schedule = TimeHelper.format_timestamp(
            event.scheduled_time, self.config.display_timezone
        )

        try:
            hosts = await self.store.read_all()
        except StoreError as e:
            logger.error(f"{time_of_schedule}: Failed to retrieve hosts data: {e.log_format()}")
            report.error = e.message
            return report

        for host in hosts:
            report.checked += 1
            try:
                await self._evaluate_host(host, time_of_schedule, report)
            except StoreError as e:
                logger.error(
                    f"{time_of_schedule}: Failed to write updates for '{host.hostname}', "
                    f"aborting sweep: {e.log_format()}"
                )
                report.aborted = True
                report.error = e.message
                break

        logger.info(
            f"{time_of_schedule}: Sweep finished: checked={report.checked}, "
            f"offline={len(report.went_offline)}, recovered={len(report.recovered)}"
            + (", aborted" if report.aborted else "")
        )
        return report

    async def _evaluate_host(self, host: HostRecord, time_of_schedule: str, report: SweepReport) -> None:
        elapsed = host.elapsed(self.clock())
        transition = evaluate_transition(self.config.policy, host.disconnected, elapsed)

        if transition is Transition.NONE:
            if host.disconnected:
                logger.info(
                    f"{time_of_schedule}: Checked '{host.hostname}', which is known to be offline. "
                    f"Time since last check-in: {elapsed}s."
                )
            else:
                logger.info(
                    f"{time_of_schedule}: Checked '{host.hostname}'. "
                    f"Time since last check-in: {elapsed}s."
                )
            return

        applied = await self.store.update(
            host.host_key,
            {"disconnected": transition.disconnected},
            expected_disconnected=host.disconnected,
        )
        if not applied:
            logger.info(
                f"{time_of_schedule}: '{host.hostname}' changed while being checked, skipping."
            )
            report.skipped.append(host.hostname)
            return

        if transition is Transition.RECOVERED:
            logger.info(
                f"{time_of_schedule}: Checked '{host.hostname}', and it has recovered "
                f"from disconnection after {elapsed}s."
            )
            report.recovered.append(host.hostname)
            await self.alert_channel.dispatch(build_recovery_alert(host, elapsed))
        else:
            logger.warning(
                f"{time_of_schedule}: Checked '{host.hostname}', and it seems to be offline."
            )
            report.went_offline.append(host.hostname)
            await self.alert_channel.dispatch(
                build_offline_alert(host, self.config.display_timezone)
            )
