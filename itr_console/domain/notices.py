"""Transient user-facing notifications (toasts)."""

from dataclasses import dataclass
from typing import Literal

NoticeVariant = Literal["default", "destructive"]


@dataclass(frozen=True)
class Notice:
    title: str
    message: str
    variant: NoticeVariant = "default"

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"


def info(title: str, message: str) -> Notice:
    return Notice(title=title, message=message)


def error(title: str, message: str) -> Notice:
    return Notice(title=title, message=message, variant="destructive")
