import logging

import flet as ft

from itr_console.domain.notices import Notice

logger = logging.getLogger(__name__)


class SnackBarNotices:
    """Shows notices as a flet SnackBar on one page."""

    def __init__(self, page: ft.Page):
        self.page = page

    def notify(self, notice: Notice) -> None:
        if notice.is_error:
            logger.info(f"Error notice shown: {notice.title}")
        snack = ft.SnackBar(
            ft.Column(
                [
                    ft.Text(notice.title, weight=ft.FontWeight.BOLD),
                    ft.Text(notice.message),
                ],
                tight=True,
                spacing=2,
            ),
            bgcolor="error" if notice.is_error else None,
        )
        self.page.open(snack)
