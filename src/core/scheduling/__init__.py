#!/usr/bin/env python3
"""
Scheduling for periodic article collection.

Cron parsing plus the loop that drives scheduled collections.
"""

from .cron import CronSchedule
from .periodic import PeriodicCollector

__all__ = ['CronSchedule', 'PeriodicCollector']
