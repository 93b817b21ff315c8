"""
Scheduling Services Module

This module provides the day schedule logic of the portal:
- Schedule composition (composition.py)
- Day schedule assembly from Bell Schedules and overrides (day_schedule.py)
- Scheduled tasks (tasks.py)
"""
