from __future__ import annotations

from pathlib import Path
from typing import Iterable

from reposync.errors import AliasWriteError
from reposync.models import RepoRecord


SHORTCUT_TEMPLATES = {
    "fish": "abbr --add {name} 'cd {location} && ls && cat README.md && git pull'",
    "bash": "alias {name}='cd {location} && ls && cat README.md && git pull'",
}


def env_identifier(name: str) -> str:
    return name.upper().replace("-", "_").replace(".", "_")


def render_aliases(records: Iterable[RepoRecord], style: str = "fish") -> str:
    # Names and locations are emitted verbatim; shell metacharacters are not escaped.
    template = SHORTCUT_TEMPLATES[style]
    lines: list[str] = []
    for record in sorted(records, key=lambda r: r.name):
        lines.append(template.format(name=record.name, location=record.location))
        lines.append(f'export {env_identifier(record.name)}="{record.location}"')
    return "".join(f"{line}\n" for line in lines)


def write_alias_file(path: Path, content: str) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise AliasWriteError(f"Cannot write alias file {path}: {exc}") from exc
    return path
