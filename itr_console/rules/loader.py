"""
Loads `rules.yaml` into the Rules model.

The file may also be a markdown document carrying the rules in its first
```yaml fence. Errors name the offending section so a broken deploy points
straight at the key to fix.
"""

import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from itr_console.rules.models import Rules

_YAML_FENCE = re.compile(r"^\s*```ya?ml\s*\n(.*?)^\s*```", re.MULTILINE | re.DOTALL)


def _yaml_text(content: str) -> str:
    match = _YAML_FENCE.search(content)
    return match.group(1) if match else content


def _describe(e: ValidationError) -> str:
    lines = []
    for err in e.errors():
        where = ".".join(str(p) for p in err["loc"]) or "<root>"
        lines.append(f"  {where}: {err['msg']}")
    return "\n".join(lines)


def load_rules(path: Path | str) -> Rules:
    """
    Raises FileNotFoundError if the file is missing, ValueError if the YAML
    is malformed, has unknown sections or fails validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    try:
        data: Any = yaml.safe_load(_yaml_text(path.read_text()))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    if data is None:
        return Rules()
    if not isinstance(data, dict):
        raise ValueError(f"Rules file must be a mapping of sections, got {type(data).__name__}")

    unknown = sorted(set(data) - set(Rules.model_fields))
    if unknown:
        raise ValueError(f"Unknown rules section(s): {', '.join(map(str, unknown))}")

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        sections = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise ValueError(
            f"Rules validation failed in section(s) {', '.join(sections)}:\n{_describe(e)}"
        ) from e
