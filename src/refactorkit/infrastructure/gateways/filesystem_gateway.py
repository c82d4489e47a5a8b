"""Filesystem Gateway - Infrastructure implementation of FileSystemProtocol."""

import fnmatch
import os
import shutil
from pathlib import Path

from refactorkit.domain.protocols import FileSystemProtocol


class FileSystemGateway(FileSystemProtocol):
    """Infrastructure implementation of FileSystemProtocol using pathlib."""

    def resolve_path(self, path: str) -> str:
        """Resolve and normalize a path string."""
        return str(Path(path).resolve())

    def is_directory(self, path: str) -> bool:
        """Check if path is a directory."""
        return Path(path).is_dir()

    def exists(self, path: str) -> bool:
        """Check if path exists."""
        return Path(path).exists()

    def glob_source_files(self, path: str, include: list[str], exclude: list[str]) -> list[str]:
        """
        Get all source files under path matching include globs, sorted.

        Directories named in exclude are never descended into. A single file
        is matched by its name alone.
        """
        path_obj = Path(path).resolve()
        if not path_obj.is_dir():
            if path_obj.is_file() and self._included(path_obj.name, include):
                return [str(path_obj)]
            return []

        excluded = set(exclude)
        found: list[str] = []
        for root, dirs, files in os.walk(path_obj):
            dirs[:] = sorted(d for d in dirs if d not in excluded)
            for name in sorted(files):
                full = Path(root) / name
                relative = full.relative_to(path_obj).as_posix()
                if self._included(relative, include):
                    found.append(str(full))
        return found

    @staticmethod
    def _included(relative: str, include: list[str]) -> bool:
        """Match a posix relative path; a leading "**/" also matches at the top level."""
        for pattern in include:
            if fnmatch.fnmatch(relative, pattern):
                return True
            if pattern.startswith("**/") and fnmatch.fnmatch(relative, pattern[3:]):
                return True
        return False

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Read text content from a file, keeping its line endings."""
        with open(path, encoding=encoding, newline="") as f:
            return f.read()

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """Write text content to a file without translating line endings."""
        with open(path, "w", encoding=encoding, newline="") as f:
            f.write(content)

    def backup(self, path: str) -> str:
        """Copy path to path + '.bak' and return the backup path."""
        target = f"{path}.bak"
        shutil.copy2(path, target)
        return target

    def relative_to_cwd(self, path: str) -> str:
        """Return path relative to the working directory when possible."""
        try:
            return str(Path(path).resolve().relative_to(Path.cwd()))
        except ValueError:
            return path
