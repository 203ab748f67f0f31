"""
============================================================================
HOSTWATCH - MONITORING PACKAGE
============================================================================
    • ThresholdPolicy    — single / dual threshold state transitions
    • CheckinHandler     — records check-ins, detects recovery
    • SweepEvaluator     — periodic evaluation of every host
    • AlertChannel       — Pushover delivery or local logging
    • Scheduler          — periodic background job runner
    • CheckinServer      — aiohttp endpoint hosts report to

monitoring/
├── __init__.py          ← this file
├── policy.py            ← ThresholdPolicy, evaluate_transition, MonitorConfig
├── checkin.py           ← CheckinHandler
├── sweep.py             ← SweepEvaluator, ScheduledEvent, SweepReport
├── messages.py          ← alert titles and bodies
├── alerts.py            ← AlertChannel, PushoverChannel, LogChannel
├── scheduler.py         ← Scheduler + ScheduledJob
└── server.py            ← CheckinServer
============================================================================
"""

from monitoring.policy import ThresholdPolicy, Transition, MonitorConfig, evaluate_transition
from monitoring.alerts import AlertChannel, AlertPayload, PushoverChannel, LogChannel, create_alert_channel
from monitoring.checkin import CheckinHandler, CheckinResult
from monitoring.sweep import SweepEvaluator, SweepReport, ScheduledEvent
from monitoring.scheduler import Scheduler, ScheduledJob
from monitoring.server import CheckinServer

__all__ = [
    # Policy
    "ThresholdPolicy",
    "Transition",
    "MonitorConfig",
    "evaluate_transition",

    # Alerts
    "AlertChannel",
    "AlertPayload",
    "PushoverChannel",
    "LogChannel",
    "create_alert_channel",

    # Check-in & sweep
    "CheckinHandler",
    "CheckinResult",
    "SweepEvaluator",
    "SweepReport",
    "ScheduledEvent",

    # Scheduler & server
    "Scheduler",
    "ScheduledJob",
    "CheckinServer",
]
