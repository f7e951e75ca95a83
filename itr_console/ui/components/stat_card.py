from typing import Any

import flet as ft


class StatCard(ft.Container):  # type: ignore
    """
    Card used for dashboard figures and list rows, with a small hover lift.
    """

    def __init__(
        self,
        content: ft.Control,
        width: float | None = None,
        height: float | None = None,
        padding: float = 20,
        on_click: Any | None = None,
        expand: bool | int = False,
    ):
        super().__init__(
            content=content,
            width=width,
            height=height,
            padding=padding,
            border_radius=ft.border_radius.all(12),
            bgcolor="surfaceVariant",
            on_hover=self._on_hover,
            on_click=on_click,
            expand=expand,
            shadow=ft.BoxShadow(
                spread_radius=0,
                blur_radius=8,
                color="#1A000000",
                offset=ft.Offset(0, 2),
            ),
        )

    def _on_hover(self, e: ft.HoverEvent) -> None:
        lifted = e.data == "true"
        self.shadow.blur_radius = 16 if lifted else 8
        self.shadow.offset = ft.Offset(0, 6 if lifted else 2)
        self.update()


def status_badge(status: str, color: str) -> ft.Control:
    return ft.Container(
        content=ft.Text(status, size=12, color="white"),
        bgcolor=color,
        padding=ft.padding.symmetric(horizontal=8, vertical=3),
        border_radius=10,
    )
