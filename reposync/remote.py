from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol


logger = logging.getLogger(__name__)


class RemoteSync(Protocol):
    def ensure_cloned(self, name: str, location: str) -> bool: ...

    def pull(self, location: str) -> bool: ...

    def sync(self, location: str) -> bool: ...


class CommandRemote:
    """Runs `gh` and `git` with the operator's terminal attached.

    Failures are logged and reported as False so one bad remote does not stop
    the rest of the run.
    """

    def __init__(self, *, sync_command: str = "pull", dry_run: bool = False) -> None:
        self.sync_command = sync_command
        self.dry_run = dry_run

    def _run(self, args: list[str], *, cwd: Path) -> bool:
        command = " ".join(args)
        if self.dry_run:
            logger.info("[dry-run] (%s) %s", cwd, command)
            return True
        logger.debug("Running `%s` in %s", command, cwd)
        try:
            subprocess.run(args, cwd=cwd, check=True)
        except subprocess.CalledProcessError as exc:
            logger.warning("`%s` in %s exited with status %s", command, cwd, exc.returncode)
            return False
        except OSError as exc:
            logger.warning("Cannot run `%s` in %s: %s", command, cwd, exc)
            return False
        return True

    def ensure_cloned(self, name: str, location: str) -> bool:
        parent = Path(location).parent
        if not self.dry_run:
            try:
                parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                logger.warning("Cannot create %s for %s: %s", parent, name, exc)
                return False
        return self._run(["gh", "repo", "clone", name, location], cwd=parent)

    def pull(self, location: str) -> bool:
        if self.sync_command == "gh":
            return self.sync(location)
        return self._run(["git", "pull"], cwd=Path(location))

    def sync(self, location: str) -> bool:
        return self._run(["gh", "repo", "sync"], cwd=Path(location))
