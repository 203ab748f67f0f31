"""
Utilities Package for HostWatch
"""

from utils.logger import get_logger, setup_logging
from utils.helpers import TimeHelper, StringHelper

__all__ = [
    "get_logger",
    "setup_logging",
    "TimeHelper",
    "StringHelper",
]
