from __future__ import annotations

import logging
from pathlib import Path


logger = logging.getLogger(__name__)

GIT_DIRNAME = ".git"
GIT_CONFIG_FILENAME = "config"


def is_owned_by(identity: str, config_text: str) -> bool:
    """Return True when the identity token appears anywhere in the git config text."""
    token = identity.strip().lower()
    if not token:
        return False
    return token in config_text.lower()


def git_config_path(repo_dir: Path) -> Path:
    return repo_dir / GIT_DIRNAME / GIT_CONFIG_FILENAME


def repo_is_owned(config_file: Path, identity: str) -> bool:
    try:
        text = config_file.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.warning("Cannot read %s, treating repository as not owned: %s", config_file, exc)
        return False
    return is_owned_by(identity, text)
