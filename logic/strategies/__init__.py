"""
Strategy state machines.

Strategies consume indicator output and raw market metrics as plain updates
and publish decisions; they never execute trades themselves.
"""

from .launch_sniper import LaunchSniperStrategy

__all__ = [
    "LaunchSniperStrategy",
]
