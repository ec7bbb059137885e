"""Filesystem helpers for n8ninstaller."""

import logging
import os
import tempfile
from typing import Callable

from n8ninstaller.errors import FileWriteError


class FileSystemService:
    """Encapsulates file and directory side effects on the host."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def ensure_dir(self, path: str, mode: int):
        try:
            os.makedirs(path, exist_ok=True)
            os.chmod(path, mode)
        except OSError as exc:
            raise FileWriteError(f"Could not create directory {path}: {exc}") from exc

    def write_file(self, path: str, content: str, mode: int):
        """Atomically replaces ``path`` so readers never observe a partial file."""
        directory = os.path.dirname(path) or "."
        try:
            os.makedirs(directory, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(prefix=".n8ninstaller-", dir=directory)
        except OSError as exc:
            raise FileWriteError(f"Could not write {path}: {exc}") from exc

        try:
            os.chmod(temp_path, mode)
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as file_obj:
                file_obj.write(content)
            os.replace(temp_path, path)
        except OSError as exc:
            raise FileWriteError(f"Could not write {path}: {exc}") from exc
        finally:
            if os.path.exists(temp_path):
                os.remove(temp_path)

        self.logger.debug("Wrote %s (mode %o)", path, mode)

    def ensure_symlink(self, target: str, link_path: str) -> bool:
        """Returns False when ``link_path`` already points at ``target``."""
        if os.path.islink(link_path):
            if os.readlink(link_path) == target:
                return False
            raise FileWriteError(
                f"{link_path} already links to {os.readlink(link_path)}, expected {target}."
            )
        if os.path.exists(link_path):
            raise FileWriteError(f"{link_path} exists and is not a symlink.")

        try:
            os.makedirs(os.path.dirname(link_path) or ".", exist_ok=True)
            os.symlink(target, link_path)
        except OSError as exc:
            raise FileWriteError(f"Could not link {link_path} -> {target}: {exc}") from exc
        return True

    def chown_tree(self, path: str, user: str, run_cmd: Callable):
        run_cmd(
            ["chown", "-R", f"{user}:{user}", path],
            capture_output=True,
            error_cls=FileWriteError,
        )
