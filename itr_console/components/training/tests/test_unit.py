"""
Training component unit tests.
"""

from __future__ import annotations

from itr_console.components.training import run_certifications_by_level
from itr_console.domain.entities import Certification
from itr_console.domain.errors import BackendError


class MockCertificationRepo:
    def __init__(self, certs: list[Certification], fail: bool = False) -> None:
        self.certs = certs
        self.fail = fail

    def list_all(self) -> list[Certification]:
        if self.fail:
            raise BackendError("select failed")
        return self.certs


def test_grouped_by_level():
    repo = MockCertificationRepo(
        [
            Certification(name="WEDA Expert", level=3, product_name="WEDA"),
            Certification(name="Hellodoc Basics", level=1, product_name="Hellodoc"),
            Certification(name="WEDA Basics", level=1, product_name="WEDA"),
            Certification(name="WEDA Onboarding", level=2, product_name="WEDA"),
        ]
    )

    out = run_certifications_by_level(repo=repo)

    assert out.success is True
    assert [lvl.level for lvl in out.levels] == [1, 2, 3]
    assert [c.name for c in out.levels[0].certifications] == ["Hellodoc Basics", "WEDA Basics"]
    assert out.total == 4


def test_empty_catalogue():
    out = run_certifications_by_level(repo=MockCertificationRepo([]))

    assert out.success is True
    assert out.levels == []


def test_backend_failure():
    out = run_certifications_by_level(repo=MockCertificationRepo([], fail=True))

    assert out.success is False
    assert out.error == "select failed"
