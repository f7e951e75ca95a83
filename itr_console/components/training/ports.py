from typing import Protocol

from itr_console.domain.entities import Certification


class CertificationRepoPort(Protocol):
    def list_all(self) -> list[Certification]: ...
