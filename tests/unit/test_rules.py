from pathlib import Path

import pytest

from itr_console.rules.loader import load_rules
from itr_console.rules.models import Rules


def test_project_rules_load(rules):
    assert rules.auth.invitation_code_length == 8
    assert rules.auth.auth_route == "/auth"
    assert rules.backend.provider == "sqlite"
    assert rules.rate_limits.magic_link.max_requests == 3
    assert "pending" in rules.onboarding.status_values
    assert rules.onboarding.products


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_rules(tmp_path / "nope.yaml")


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("")

    assert load_rules(path) == Rules()


def test_markdown_fenced_rules(tmp_path):
    path = tmp_path / "rules.md"
    path.write_text(
        "# Rules\n\nSome prose.\n\n```yaml\nauth:\n  invitation_code_length: 6\n```\n\nMore prose.\n"
    )

    rules = load_rules(path)

    assert rules.auth.invitation_code_length == 6


def test_invalid_yaml_raises_value_error(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("auth: [unclosed")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_rules(path)


def test_schema_violation_raises_value_error(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("backend:\n  provider: oracle\n")

    with pytest.raises(ValueError, match=r"Rules validation failed in section\(s\) backend") as exc:
        load_rules(path)

    assert "backend.provider" in str(exc.value)


def test_code_length_must_be_positive(tmp_path: Path):
    path = tmp_path / "rules.yaml"
    path.write_text("auth:\n  invitation_code_length: 0\n")

    with pytest.raises(ValueError):
        load_rules(path)


def test_failing_sections_are_all_named(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("auth:\n  otp_ttl_minutes: 0\nchat:\n  max_polls: lots\n")

    with pytest.raises(ValueError, match=r"section\(s\) auth, chat"):
        load_rules(path)


def test_unknown_section_raises(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("auth:\n  invitation_code_length: 8\nbilling:\n  plan: gold\n")

    with pytest.raises(ValueError, match="Unknown rules section\\(s\\): billing"):
        load_rules(path)


def test_top_level_list_raises(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("- auth\n- backend\n")

    with pytest.raises(ValueError, match="mapping of sections"):
        load_rules(path)


def test_string_path_is_accepted(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text("backend:\n  provider: supabase\n")

    assert load_rules(str(path)).backend.provider == "supabase"
