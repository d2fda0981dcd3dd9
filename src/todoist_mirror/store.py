"""Local vault file store."""

import os
from pathlib import Path, PurePosixPath
from typing import Any

from loguru import logger

from todoist_mirror.exceptions import ConflictError, StoreError
from todoist_mirror.notes import parse_frontmatter


def _skip_unreadable(e: OSError) -> None:
    logger.warning("Skipping unreadable folder {!r}: {}", e.filename, e.strerror or e)


class VaultStore:
    """File store rooted at a vault directory.

    All paths passed in and returned are vault-relative POSIX strings.

    - Never overwrite: creating or moving onto an occupied path raises
      ConflictError.
    - Creating a folder that exists is a no-op.
    - In dry-run mode, mutations are logged and not performed.
    """

    # Directories never scanned (editor config, trash, version control).
    SKIP_DIRS = frozenset({".obsidian", ".trash", ".git"})

    def __init__(self, vault_path: str | Path, *, dry_run: bool = False) -> None:
        self.root = Path(vault_path).expanduser().resolve()
        self.dry_run = dry_run

        if not self.root.is_dir():
            msg = f"Vault directory {str(self.root)!r} not found"
            raise ValueError(msg)

        logger.debug("Store ready, vault {!r}, dry_run {!r}", str(self.root), dry_run)

    def _abs(self, path: str) -> Path:
        if PurePosixPath(path).is_absolute():
            msg = f"must be relative: {path!r}"
            raise ValueError(msg)
        # Lexical check only: symlinked notes are read through, not resolved.
        full = Path(os.path.normpath(self.root / path))
        if full != self.root and self.root not in full.parents:
            msg = f"Path escapes vault: {path!r}"
            raise ValueError(msg)
        return full

    def _rel(self, full: Path) -> str:
        return full.relative_to(self.root).as_posix()

    def exists(self, path: str) -> bool:
        return self._abs(path).exists()

    def create_folder(self, path: str) -> None:
        full = self._abs(path)
        if full.is_dir():
            return
        if self.dry_run:
            logger.info("dry-run: would create folder {!r}", path)
            return
        logger.debug("Creating folder {!r}", path)
        try:
            full.mkdir(parents=True, exist_ok=True)
        except FileExistsError as e:
            msg = f"Cannot create folder {path!r}: a file is in the way"
            raise ConflictError(msg) from e
        except OSError as e:
            msg = f"Cannot create folder {path!r}: {e}"
            raise StoreError(msg) from e

    def create_file(self, path: str, content: str) -> None:
        full = self._abs(path)
        if self.dry_run:
            logger.info("dry-run: would create {!r}", path)
            return
        logger.debug("Creating file {!r}", path)
        try:
            # "x" mode refuses to clobber a file created since we last looked.
            with open(full, "x", encoding="utf-8") as f:
                f.write(content)
        except FileExistsError as e:
            msg = f"Cannot create {path!r}: path already exists"
            raise ConflictError(msg) from e
        except OSError as e:
            msg = f"Cannot create {path!r}: {e}"
            raise StoreError(msg) from e

    def rename(self, path: str, new_path: str) -> None:
        src = self._abs(path)
        dst = self._abs(new_path)
        case_only = dst.exists() and src != dst and self.same_file(path, new_path)
        if dst.exists() and not case_only:
            msg = f"Cannot move {path!r} to {new_path!r}: target already exists"
            raise ConflictError(msg)
        if not src.is_file():
            msg = f"Cannot move {path!r}: source not found"
            raise StoreError(msg)
        if self.dry_run:
            logger.info("dry-run: would move {!r} -> {!r}", path, new_path)
            return
        logger.debug("Moving {!r} -> {!r}", path, new_path)
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            if case_only:
                # Some case-insensitive file systems ignore a rename that only changes case.
                temporary = src.with_name(f"~{src.name}")
                src.rename(temporary)
                temporary.rename(dst)
            else:
                src.rename(dst)
        except OSError as e:
            msg = f"Cannot move {path!r} to {new_path!r}: {e}"
            raise StoreError(msg) from e

    def list_markdown_files(self) -> list[str]:
        found: list[str] = []
        for dirpath, dirnames, filenames in os.walk(self.root, onerror=_skip_unreadable):
            dirnames[:] = sorted(d for d in dirnames if d not in self.SKIP_DIRS)
            found.extend(
                self._rel(Path(dirpath) / name) for name in filenames if name.endswith(".md")
            )
        return sorted(found)

    def read_metadata(self, path: str) -> dict[str, Any]:
        full = self._abs(path)
        try:
            with open(full, encoding="utf-8") as f:
                text = f.read()
        except UnicodeDecodeError:
            logger.debug("Skipping non-UTF-8 note {!r}", path)
            return {}
        except OSError as e:
            msg = f"Cannot read {path!r}: {e}"
            raise StoreError(msg) from e
        return parse_frontmatter(text, source=path)

    def same_file(self, path: str, other: str) -> bool:
        """True when both paths name the same file, e.g. on a case-insensitive file system."""
        try:
            return os.path.samefile(self._abs(path), self._abs(other))
        except OSError:
            return False

    def remove_empty_folder(self, path: str) -> bool:
        full = self._abs(path)
        if full == self.root or not full.is_dir() or any(full.iterdir()):
            return False
        if self.dry_run:
            logger.info("dry-run: would remove empty folder {!r}", path)
            return True
        logger.debug("Removing empty folder {!r}", path)
        try:
            full.rmdir()
        except OSError as e:
            msg = f"Cannot remove folder {path!r}: {e}"
            raise StoreError(msg) from e
        return True
