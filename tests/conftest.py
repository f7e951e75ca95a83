from pathlib import Path

import pytest

from itr_console.adapters.auth.tokens import JWTTokenAdapter
from itr_console.adapters.dev_email import DevEmailAdapter
from itr_console.adapters.local_identity import LocalIdentityProvider
from itr_console.adapters.sqlite.migrator import SQLiteMigrator
from itr_console.adapters.sqlite.repos import SQLiteCompanyRepo, SQLiteProfileRepo
from itr_console.domain.entities import Company
from itr_console.rules.loader import load_rules
from itr_console.rules.models import Rules

ROOT = Path(__file__).resolve().parents[1]
MIGRATIONS_DIR = str(ROOT / "migrations")


@pytest.fixture
def rules() -> Rules:
    """Real rules from the project root."""
    return load_rules(ROOT / "rules.yaml")


@pytest.fixture
def db_path(tmp_path) -> str:
    """Temporary SQLite database with every migration applied."""
    path = str(tmp_path / "itr.db")
    SQLiteMigrator(path, MIGRATIONS_DIR).run_migrations()
    return path


@pytest.fixture
def company(db_path) -> Company:
    return SQLiteCompanyRepo(db_path).save(Company(name="Acme Clinic", invitation_code="ACME2024"))


@pytest.fixture
def dev_email() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def tokens() -> JWTTokenAdapter:
    return JWTTokenAdapter("test-secret")


@pytest.fixture
def local_identity(db_path, dev_email, tokens) -> LocalIdentityProvider:
    return LocalIdentityProvider(
        db_path,
        email=dev_email,
        tokens=tokens,
        api_url="http://api.test",
        profile_repo=SQLiteProfileRepo(db_path),
    )
