import os
import sys
from functools import lru_cache
from pathlib import Path

from itr_console.rules.models import Rules


class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("ITR_DATA_DIR", "./data"))
        self.db_path = os.environ.get("ITR_DB_PATH", str(self.data_dir / "itr.db"))
        self.rules_path = Path(os.environ.get("ITR_RULES_PATH", str(self.base_dir / "rules.yaml")))
        self.migrations_dir = os.environ.get("ITR_MIGRATIONS_DIR", str(self.base_dir / "migrations"))
        # Where the console is served; sign-in links come back to {site_url}/auth
        self.site_url = os.environ.get("ITR_SITE_URL", "http://localhost:8550").rstrip("/")
        # Where the API is served; the local identity provider links to its verify endpoint
        self.api_url = os.environ.get("ITR_API_URL", "http://localhost:8000").rstrip("/")
        self.secret_key = os.environ.get("ITR_SECRET_KEY", "dev-secret-unsafe")
        self.supabase_url = os.environ.get("SUPABASE_URL", "").rstrip("/")
        self.supabase_anon_key = os.environ.get("SUPABASE_ANON_KEY", "")
        self.openai_api_key = os.environ.get("OPENAI_API_KEY", "")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def validate_ops_rules(rules: Rules, settings: Settings) -> None:
    """
    Validate operational requirements before startup.
    """
    missing = [env_var for env_var in rules.ops.required_env if env_var not in os.environ]
    if missing:
        print(
            f"CRITICAL: Missing required environment variables: {', '.join(missing)}",
            file=sys.stderr,
        )
        sys.exit(1)

    if rules.backend.provider == "supabase" and not (
        settings.supabase_url and settings.supabase_anon_key
    ):
        print(
            "CRITICAL: backend.provider is 'supabase' but SUPABASE_URL / "
            "SUPABASE_ANON_KEY are not set",
            file=sys.stderr,
        )
        sys.exit(1)

    if rules.backend.provider == "sqlite":
        Path(settings.db_path).parent.mkdir(parents=True, exist_ok=True)

    print("Configuration Validated.")
