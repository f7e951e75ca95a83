"""
SSO log component unit tests.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from itr_console.components.sso_logs import (
    QuerySsoInput,
    RecordSsoInput,
    SsoLogRecorder,
    run_query,
    run_record,
)
from itr_console.domain.entities import SsoLog
from itr_console.domain.errors import BackendError


class MockSsoLogRepo:
    def __init__(self) -> None:
        self.rows: list[SsoLog] = []
        self.fail = False

    def save(self, log: SsoLog) -> None:
        if self.fail:
            raise BackendError("insert failed")
        self.rows.append(log)

    def list_recent(self, limit: int = 200) -> list[SsoLog]:
        if self.fail:
            raise BackendError("select failed")
        return sorted(self.rows, key=lambda r: r.created_at, reverse=True)[:limit]


class MockTimePort:
    def __init__(self) -> None:
        self._time = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self._time

    def advance(self, seconds: int) -> None:
        self._time += timedelta(seconds=seconds)


@pytest.fixture
def repo() -> MockSsoLogRepo:
    return MockSsoLogRepo()


@pytest.fixture
def time_port() -> MockTimePort:
    return MockTimePort()


class TestRecord:
    def test_record_event(self, repo: MockSsoLogRepo, time_port: MockTimePort) -> None:
        out = run_record(
            RecordSsoInput(
                event_type="invitation_verified",
                company_id="company-acme",
                ip_address="10.0.0.1",
                metadata={"mode": "signup", "dropped": None},
            ),
            repo=repo,
            time_port=time_port,
        )

        assert out.success is True
        assert out.log is not None
        assert out.log.itr_company_id == "company-acme"
        assert out.log.metadata == {"mode": "signup"}
        assert out.log.created_at == time_port.now_utc()
        assert repo.rows == [out.log]

    def test_blank_event_type(self, repo: MockSsoLogRepo, time_port: MockTimePort) -> None:
        out = run_record(RecordSsoInput(event_type=" "), repo=repo, time_port=time_port)

        assert out.success is False
        assert repo.rows == []

    def test_backend_failure_is_reported(self, repo: MockSsoLogRepo, time_port: MockTimePort) -> None:
        repo.fail = True

        out = run_record(RecordSsoInput(event_type="x"), repo=repo, time_port=time_port)

        assert out.success is False
        assert out.error == "insert failed"

    def test_recorder_never_raises(self, repo: MockSsoLogRepo, time_port: MockTimePort) -> None:
        recorder = SsoLogRecorder(repo, time_port, ip_address="10.0.0.2", user_agent="flet")
        recorder.record("magic_link_requested", metadata={"mode": "login"})
        repo.fail = True

        recorder.record("magic_link_requested")

        assert len(repo.rows) == 1
        assert repo.rows[0].user_agent == "flet"


class TestQuery:
    @pytest.fixture
    def populated(self, repo: MockSsoLogRepo, time_port: MockTimePort) -> MockSsoLogRepo:
        for event, company, ip in [
            ("invitation_verified", "Acme Clinic", "10.0.0.1"),
            ("callback_failed", "Hellodoc Partners", "192.168.1.7"),
            ("callback_succeeded", None, "10.0.0.9"),
        ]:
            repo.rows.append(
                SsoLog(
                    event_type=event,
                    company_name=company,
                    ip_address=ip,
                    created_at=time_port.now_utc(),
                )
            )
            time_port.advance(60)
        return repo

    def test_newest_first(self, populated: MockSsoLogRepo) -> None:
        out = run_query(QuerySsoInput(), repo=populated)

        assert [log.event_type for log in out.logs] == [
            "callback_succeeded",
            "callback_failed",
            "invitation_verified",
        ]

    @pytest.mark.parametrize(
        "search,expected",
        [
            ("CALLBACK", {"callback_failed", "callback_succeeded"}),
            ("acme", {"invitation_verified"}),
            ("192.168", {"callback_failed"}),
            ("nothing-matches", set()),
        ],
    )
    def test_search(self, populated: MockSsoLogRepo, search: str, expected: set[str]) -> None:
        out = run_query(QuerySsoInput(search=search), repo=populated)

        assert {log.event_type for log in out.logs} == expected

    def test_backend_failure(self, populated: MockSsoLogRepo) -> None:
        populated.fail = True

        out = run_query(QuerySsoInput(), repo=populated)

        assert out.success is False
