from typing import Protocol

from itr_console.domain.entities import Company


class CompanyRepoPort(Protocol):
    def find_by_invitation_code(self, code: str) -> list[Company]: ...
