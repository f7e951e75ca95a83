"""
Auth store component - owns the current session and notifies listeners.
"""

from .component import AuthStore, Listener
from .models import AuthSnapshot
from .ports import IdentityPort, NoticePort

__all__ = [
    "AuthStore",
    "AuthSnapshot",
    "Listener",
    "IdentityPort",
    "NoticePort",
]
