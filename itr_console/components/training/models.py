from dataclasses import dataclass, field

from itr_console.domain.entities import Certification


@dataclass
class CertificationLevel:
    level: int
    certifications: list[Certification] = field(default_factory=list)


@dataclass
class CertificationsOutput:
    levels: list[CertificationLevel] = field(default_factory=list)
    success: bool = False
    error: str | None = None

    @property
    def total(self) -> int:
        return sum(len(lvl.certifications) for lvl in self.levels)
