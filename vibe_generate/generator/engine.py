"""Materialize a template into ``output_dir/project_name``.

Every literal ``{{project-name}}`` in path segments and in UTF-8 file contents
is replaced with the project name. Anything that does not decode as UTF-8 is
copied byte for byte.
"""
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple
from uuid import uuid4

from .errors import DestinationExists, PathCollision, PathEscape, ScaffoldIOError
from .source import PLACEHOLDER, TemplateEntry, TemplateSource

logger = logging.getLogger(__name__)

_FORBIDDEN_SEGMENTS = {"", ".", ".."}


@dataclass
class ScaffoldStats:
    directories: int = 0
    files: int = 0
    substituted: int = 0
    binary: int = 0


def is_text(data: bytes) -> bool:
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def substitute_content(data: bytes, project_name: str) -> bytes:
    """Replace the placeholder in text content; leave binary content alone."""
    if PLACEHOLDER.encode("utf-8") not in data or not is_text(data):
        return data
    return data.decode("utf-8").replace(PLACEHOLDER, project_name).encode("utf-8")


def check_destination(destination: Path) -> None:
    """Raise ``DestinationExists`` unless ``destination`` is absent or an empty dir."""
    if not (destination.exists() or destination.is_symlink()):
        return
    if not destination.is_dir():
        raise DestinationExists(destination)
    try:
        occupied = any(destination.iterdir())
    except OSError as e:
        raise ScaffoldIOError(destination, e, partial=False) from e
    if occupied:
        raise DestinationExists(destination)


def render_parts(parts: Tuple[str, ...], project_name: str) -> Path:
    for part in parts:
        if part in _FORBIDDEN_SEGMENTS or "/" in part or "\\" in part or os.path.isabs(part):
            raise PathEscape(parts)
    return Path(*(part.replace(PLACEHOLDER, project_name) for part in parts))


def _inside(root: Path, rel: Path) -> bool:
    if rel.is_absolute():
        return False
    base = os.path.normpath(root)
    target = os.path.normpath(os.path.join(base, rel))
    return target != base and os.path.commonpath([base, target]) == base


def _make_executable(path: Path) -> None:
    mode = path.stat().st_mode
    # grant execute wherever read is granted
    path.chmod(mode | ((mode & 0o444) >> 2))


class ScaffoldEngine:
    def __init__(self, atomic: bool = False) -> None:
        self.atomic = atomic
        self.stats = ScaffoldStats()

    def plan(
        self, entries: Tuple[TemplateEntry, ...], project_name: str, destination: Path
    ) -> List[Tuple[Path, TemplateEntry]]:
        """Compute every output path up front; nothing is written here."""
        planned = []
        seen = set()
        for entry in entries:
            rel = render_parts(entry.parts, project_name)
            if not _inside(destination, rel):
                raise PathEscape(entry.relative_path)
            key = os.path.normpath(rel)
            if key in seen:
                raise PathCollision(rel.as_posix())
            seen.add(key)
            planned.append((rel, entry))
        return planned

    def generate(self, source: TemplateSource, project_name: str, output_dir: Path) -> Path:
        if not project_name:
            raise ValueError("project_name must be a non-empty string")
        destination = Path(output_dir) / project_name

        check_destination(destination)
        # one snapshot for the whole run
        try:
            entries = source.entries()
        except OSError as e:
            raise ScaffoldIOError(Path(e.filename or source.name), e, partial=False) from e
        planned = self.plan(entries, project_name, destination)

        self.stats = ScaffoldStats()
        logger.info(
            "Scaffolding %s from template %s (%d entries)", destination, source.name, len(planned)
        )
        if self.atomic:
            self._write_staged(planned, project_name, destination)
        else:
            self._mkdir(destination, destination)
            self._write(planned, project_name, destination, destination)

        logger.info(
            "Wrote %d files (%d substituted, %d binary) and %d directories",
            self.stats.files,
            self.stats.substituted,
            self.stats.binary,
            self.stats.directories,
        )
        return destination

    def _mkdir(self, path: Path, reported: Path) -> None:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ScaffoldIOError(reported, e) from e

    def _write(
        self,
        planned: List[Tuple[Path, TemplateEntry]],
        project_name: str,
        root: Path,
        destination: Path,
    ) -> None:
        for rel, entry in planned:
            dst_path = root / rel
            reported = destination / rel
            if entry.is_dir:
                self._mkdir(dst_path, reported)
                self.stats.directories += 1
                logger.debug("mkdir %s", reported)
                continue

            self._mkdir(dst_path.parent, reported.parent)
            data = substitute_content(entry.content, project_name)
            try:
                dst_path.write_bytes(data)
                if entry.executable:
                    _make_executable(dst_path)
            except OSError as e:
                raise ScaffoldIOError(reported, e) from e

            self.stats.files += 1
            if data != entry.content:
                self.stats.substituted += 1
            elif not is_text(entry.content):
                self.stats.binary += 1
            logger.debug("write %s (%d bytes)", reported, len(data))

    def _write_staged(
        self, planned: List[Tuple[Path, TemplateEntry]], project_name: str, destination: Path
    ) -> None:
        """Build the tree in a hidden sibling dir, then rename it into place."""
        self._mkdir(destination.parent, destination.parent)
        staging = destination.parent / f".{destination.name}.{uuid4().hex[:8]}.tmp"
        try:
            self._mkdir(staging, destination)
            self._write(planned, project_name, staging, destination)
            # rename(2) replaces an empty directory in one step
            os.replace(staging, destination)
        except OSError as e:
            shutil.rmtree(staging, ignore_errors=True)
            raise ScaffoldIOError(destination, e, partial=False) from e
        except ScaffoldIOError as e:
            shutil.rmtree(staging, ignore_errors=True)
            e.partial = False
            raise
