import flet as ft

from itr_console.components.chat import ChatConversation
from itr_console.domain import notices as notice
from itr_console.ports.notices import NoticePort
from itr_console.ui.context import ServiceContext
from itr_console.ui.state import AppState


class ChatbotView(ft.Column):  # type: ignore
    """Assistant chat; the conversation lives as long as the view."""

    def __init__(
        self, page: ft.Page, ctx: ServiceContext, state: AppState, notices: NoticePort
    ) -> None:
        super().__init__(expand=True)
        self.page = page
        self.notices = notices
        self.conversation = ChatConversation(ctx.assistant, ctx.rules.chat.default_assistant_id)

        self.messages_view = ft.ListView(expand=True, spacing=10, auto_scroll=True)
        self.input = ft.TextField(
            hint_text="Ask a question about onboarding...",
            expand=True,
            on_submit=self.send_click,
        )
        self.send_btn = ft.IconButton(ft.Icons.SEND, on_click=self.send_click)
        self.progress = ft.ProgressRing(width=20, height=20, visible=False)

        self.controls = [
            ft.Text("Assistant", size=24, weight=ft.FontWeight.BOLD),
            ft.Divider(),
            self.messages_view,
            ft.Row([self.input, self.progress, self.send_btn]),
        ]

    def _bubble(self, role: str, text: str) -> ft.Control:
        mine = role == "user"
        return ft.Row(
            [
                ft.Container(
                    content=ft.Text(text, selectable=True),
                    bgcolor="primaryContainer" if mine else "surfaceVariant",
                    padding=12,
                    border_radius=12,
                    width=520,
                )
            ],
            alignment=ft.MainAxisAlignment.END if mine else ft.MainAxisAlignment.START,
        )

    def _set_busy(self, busy: bool) -> None:
        self.input.disabled = busy
        self.send_btn.disabled = busy
        self.progress.visible = busy
        self.update()

    def send_click(self, e: ft.ControlEvent) -> None:
        text = (self.input.value or "").strip()
        if not text or self.conversation.loading:
            return

        self.input.value = ""
        self.messages_view.controls.append(self._bubble("user", text))
        self._set_busy(True)

        out = self.conversation.send(text)

        if out.success and out.message is not None:
            self.messages_view.controls.append(self._bubble("assistant", out.message))
        else:
            self.notices.notify(notice.error("Error", out.error or "Something went wrong"))
        self._set_busy(False)
