#!/usr/bin/env python3
"""
Timezone utilities for exchange-rate timestamps.
Rates are stamped in UTC and shown to the user in the display timezone.
"""

import datetime
import math
import pytz
from typing import Optional, Union

from ..config import config

def get_system_timezone() -> pytz.BaseTzInfo:
    """Get the configured system timezone."""
    return pytz.timezone(config.DEFAULT_TIMEZONE)

def get_display_timezone() -> pytz.BaseTzInfo:
    """Get the configured display timezone."""
    return pytz.timezone(config.DISPLAY_TIMEZONE)

def now_utc() -> datetime.datetime:
    """Current time as an aware UTC datetime."""
    return datetime.datetime.now(pytz.utc)

def from_epoch_seconds(value: Union[str, int, float]) -> datetime.datetime:
    """
    Convert an epoch timestamp (seconds, possibly as a string) to aware UTC.
    
    Raises:
        ValueError: if the value is not a finite non-negative number
    """
    seconds = float(value)
    if not math.isfinite(seconds) or seconds < 0:
        raise ValueError(f"Invalid epoch timestamp: {value!r}")
    return datetime.datetime.fromtimestamp(seconds, tz=pytz.utc)

def format_for_display(dt: datetime.datetime, timezone: Optional[str] = None) -> str:
    """Format datetime for display in configured timezone."""
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    
    display_tz = pytz.timezone(timezone) if timezone else get_display_timezone()
    local_dt = dt.astimezone(display_tz)
    return local_dt.strftime('%Y-%m-%d %H:%M:%S %Z')
