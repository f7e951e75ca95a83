"""
Assistant relay over the OpenAI Assistants v2 REST API.

A conversation is replayed into a fresh thread on every call (the console
keeps the history), the run is polled until it settles, and the newest
assistant message is returned.
"""

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx

from itr_console.components.chat import ChatMessage
from itr_console.domain.errors import ChatRelayError

logger = logging.getLogger(__name__)

TERMINAL_FAILURES = {"failed", "cancelled", "expired", "incomplete", "requires_action"}


class OpenAIAssistantAdapter:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        poll_interval: float = 1.0,
        max_polls: int = 30,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.poll_interval = poll_interval
        self.max_polls = max_polls
        self.timeout = timeout
        self.transport = transport
        self.sleep = sleep

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "OpenAI-Beta": "assistants=v2",
            },
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self.transport,
        )

    def _call(self, client: httpx.Client, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            r = client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise ChatRelayError(f"Assistant timed out: {e}", status_code=504) from e
        except httpx.HTTPError as e:
            raise ChatRelayError(f"Assistant connection error: {e}", status_code=502) from e
        if r.status_code >= 400:
            try:
                message = r.json().get("error", {}).get("message") or r.text
            except ValueError:
                message = r.text
            raise ChatRelayError(message or f"Assistant HTTP {r.status_code}", status_code=502)
        return r.json()

    def reply(self, assistant_id: str, messages: list[ChatMessage]) -> str:
        if not self.api_key:
            raise ChatRelayError("OPENAI_API_KEY is not configured", status_code=503)

        with self._client() as client:
            run = self._call(
                client,
                "POST",
                "/threads/runs",
                json={
                    "assistant_id": assistant_id,
                    "thread": {
                        "messages": [{"role": m.role, "content": m.content} for m in messages]
                    },
                },
            )
            thread_id, run_id = run["thread_id"], run["id"]

            polls = 0
            while run.get("status") != "completed":
                status = run.get("status")
                if status in TERMINAL_FAILURES:
                    error = (run.get("last_error") or {}).get("message")
                    raise ChatRelayError(error or f"Assistant run {status}", status_code=502)
                if polls >= self.max_polls:
                    raise ChatRelayError("Assistant did not answer in time", status_code=504)
                self.sleep(self.poll_interval)
                polls += 1
                run = self._call(client, "GET", f"/threads/{thread_id}/runs/{run_id}")

            listing = self._call(
                client,
                "GET",
                f"/threads/{thread_id}/messages",
                params={"order": "desc", "limit": "1", "run_id": run_id},
            )

        for message in listing.get("data", []):
            if message.get("role") != "assistant":
                continue
            parts = [
                part["text"]["value"]
                for part in message.get("content", [])
                if part.get("type") == "text"
            ]
            if parts:
                logger.info(f"Assistant run {run_id} completed after {polls} poll(s)")
                return "\n".join(parts)

        raise ChatRelayError("Assistant returned no text reply", status_code=502)
