"""
============================================================================
HOSTWATCH - THRESHOLD POLICY & STATE TRANSITIONS
============================================================================
A host is either online or offline (the ``disconnected`` flag). Given the
flag and the seconds elapsed since the host last checked in, a policy
decides whether the host should transition.

Policies
--------
single
    One disconnection threshold. An online host goes offline once
    ``elapsed > disconnection``. The sweep never brings a host back
    online; only a check-in does.

dual (hysteresis)
    A disconnection threshold and a lower reconnection threshold.
    An online host goes offline once ``elapsed >= disconnection``; an
    offline host comes back once ``elapsed <= reconnection``. Anything in
    between leaves the host where it is, which stops it flapping.

Both are evaluated by the same ``evaluate_transition`` function.
============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from config.constants import Defaults, ThresholdPolicyName
from config.settings import MonitorSettings


class Transition(str, Enum):
    """Outcome of evaluating one host."""

    NONE = "none"
    WENT_OFFLINE = "went_offline"
    RECOVERED = "recovered"

    @property
    def disconnected(self) -> Optional[bool]:
        """The flag value this transition writes, None for no change."""
        if self is Transition.WENT_OFFLINE:
            return True
        if self is Transition.RECOVERED:
            return False
        return None


@dataclass(frozen=True)
class ThresholdPolicy:
    """
    Threshold policy.

    Attributes
    ----------
    name : ThresholdPolicyName
    disconnection_threshold : int      — seconds
    reconnection_threshold : int|None  — seconds, dual policy only
    """
    name: ThresholdPolicyName
    disconnection_threshold: int
    reconnection_threshold: Optional[int] = None

    def __post_init__(self) -> None:
        if self.disconnection_threshold <= 0:
            raise ValueError("disconnection_threshold must be positive")
        if self.name == ThresholdPolicyName.DUAL:
            if self.reconnection_threshold is None or self.reconnection_threshold <= 0:
                raise ValueError("dual policy needs a positive reconnection_threshold")
            if self.reconnection_threshold >= self.disconnection_threshold:
                raise ValueError(
                    "reconnection_threshold must be lower than disconnection_threshold"
                )

    @classmethod
    def single(
        cls, disconnection_threshold: int = Defaults.DISCONNECTION_THRESHOLD_SINGLE
    ) -> "ThresholdPolicy":
        return cls(ThresholdPolicyName.SINGLE, disconnection_threshold)

    @classmethod
    def dual(
        cls,
        disconnection_threshold: int = Defaults.DISCONNECTION_THRESHOLD_DUAL,
        reconnection_threshold: int = Defaults.RECONNECTION_THRESHOLD,
    ) -> "ThresholdPolicy":
        return cls(ThresholdPolicyName.DUAL, disconnection_threshold, reconnection_threshold)

    @property
    def detects_recovery(self) -> bool:
        """Whether the sweep can bring an offline host back online."""
        return self.name == ThresholdPolicyName.DUAL

    def is_overdue(self, elapsed: int) -> bool:
        """True when an online host has been silent long enough to go offline."""
        if self.name == ThresholdPolicyName.SINGLE:
            return elapsed > self.disconnection_threshold
        return elapsed >= self.disconnection_threshold

    def has_recovered(self, elapsed: int) -> bool:
        """True when an offline host checked in recently enough to be online."""
        if not self.detects_recovery:
            return False
        return elapsed <= self.reconnection_threshold

    def describe(self) -> str:
        if self.detects_recovery:
            return (
                f"{self.name.value}: {self.name.description} "
                f"(offline >= {self.disconnection_threshold}s, "
                f"online <= {self.reconnection_threshold}s)"
            )
        return f"{self.name.value}: {self.name.description} (offline > {self.disconnection_threshold}s)"


def evaluate_transition(policy: ThresholdPolicy, disconnected: bool, elapsed: int) -> Transition:
    """
    Decide the transition for one host.

    Args:
        policy: Threshold policy in force
        disconnected: Current value of the host's offline flag
        elapsed: Seconds since the host last checked in

    Returns:
        The transition to apply, ``Transition.NONE`` when the host keeps
        its current state
    """
    if disconnected:
        return Transition.RECOVERED if policy.has_recovered(elapsed) else Transition.NONE
    return Transition.WENT_OFFLINE if policy.is_overdue(elapsed) else Transition.NONE


# ============================================================================
# MONITOR CONFIG
# ============================================================================

@dataclass(frozen=True)
class MonitorConfig:
    """
    Configuration handed to the check-in handler and the sweep.

    Built once per invocation from the settings so the core never reads
    the environment itself.
    """
    policy: ThresholdPolicy
    display_timezone: str = Defaults.DISPLAY_TIMEZONE
    recover_on_checkin: bool = True
    sweep_interval: int = Defaults.SWEEP_INTERVAL

    @classmethod
    def from_settings(cls, settings: MonitorSettings) -> "MonitorConfig":
        if settings.threshold_policy == ThresholdPolicyName.SINGLE:
            policy = ThresholdPolicy.single(settings.disconnection_threshold)
        else:
            policy = ThresholdPolicy.dual(
                settings.disconnection_threshold,
                settings.reconnection_threshold,
            )
        return cls(
            policy=policy,
            display_timezone=settings.display_timezone,
            recover_on_checkin=settings.recover_on_checkin,
            sweep_interval=settings.sweep_interval,
        )
