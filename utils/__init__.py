"""
Utility modules for the security times monitor.
"""

from .time_utils import daily_file_name, get_timezone, now_in_timezone

__all__ = ['daily_file_name', 'get_timezone', 'now_in_timezone']
