"""Template sources: a named file tree, backed by package data or by disk.

Both variants hand out the same ``TemplateEntry`` tuples so the registry and
the engine never need to know where a template lives.
"""
import logging
import os
import stat
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Protocol, Tuple

logger = logging.getLogger(__name__)

PLACEHOLDER = "{{project-name}}"

# Shipped with the package and baked in at build time.
EMBEDDED_ROOT = Path(__file__).resolve().parents[1] / "templates"


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"


class Origin(str, Enum):
    EMBEDDED = "embedded"
    FILESYSTEM = "filesystem"


@dataclass(frozen=True)
class TemplateEntry:
    parts: Tuple[str, ...]
    kind: EntryKind
    content: bytes = b""
    executable: bool = False

    @property
    def relative_path(self) -> str:
        return "/".join(self.parts)

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


class TemplateSource(Protocol):
    name: str
    origin: Origin

    def entries(self) -> Tuple[TemplateEntry, ...]:
        ...


def _walk_chain(root: Path, dirpath: Path) -> set:
    """Real paths of ``dirpath`` and each of its ancestors up to ``root``."""
    current = root
    chain = {os.path.realpath(current)}
    for part in dirpath.relative_to(root).parts:
        current = current / part
        chain.add(os.path.realpath(current))
    return chain


def read_tree(root: Path) -> Tuple[TemplateEntry, ...]:
    """Read every directory and file under ``root`` into sorted entries.

    Symlinked directories are followed; a link back to a directory on the
    current walk path is skipped with a warning.
    """
    root = Path(root)
    entries = []
    for dirpath, dirnames, filenames in os.walk(root, followlinks=True):
        base = Path(dirpath)
        chain = _walk_chain(root, base)
        for name in sorted(dirnames):
            src_path = base / name
            if src_path.is_symlink() and os.path.realpath(src_path) in chain:
                logger.warning("Skipping %s: symlink loop", src_path)
                dirnames.remove(name)
                continue
            entries.append(TemplateEntry(src_path.relative_to(root).parts, EntryKind.DIRECTORY))
        for name in filenames:
            src_path = base / name
            if not src_path.is_file():
                logger.warning("Skipping %s: not a regular file or directory", src_path)
                continue
            mode = src_path.stat().st_mode
            entries.append(
                TemplateEntry(
                    src_path.relative_to(root).parts,
                    EntryKind.FILE,
                    src_path.read_bytes(),
                    executable=bool(mode & stat.S_IXUSR),
                )
            )
    entries.sort(key=lambda e: e.parts)
    return tuple(entries)


class FilesystemTemplate:
    """A template directory on disk, e.g. ``templates/nextjs``."""

    origin = Origin.FILESYSTEM

    def __init__(self, name: str, root: Path) -> None:
        self.name = name
        self.root = Path(root)

    def entries(self) -> Tuple[TemplateEntry, ...]:
        return read_tree(self.root)

    def __repr__(self) -> str:
        return f"FilesystemTemplate({self.name!r}, {str(self.root)!r})"


class EmbeddedTemplate:
    """A template held entirely in memory; its entries never change."""

    origin = Origin.EMBEDDED

    def __init__(self, name: str, entries: Tuple[TemplateEntry, ...]) -> None:
        self.name = name
        self._entries = tuple(sorted(entries, key=lambda e: e.parts))

    def entries(self) -> Tuple[TemplateEntry, ...]:
        return self._entries

    def __repr__(self) -> str:
        return f"EmbeddedTemplate({self.name!r}, {len(self._entries)} entries)"


@lru_cache(maxsize=None)
def load_embedded(root: Path = EMBEDDED_ROOT) -> Mapping[str, EmbeddedTemplate]:
    """Snapshot the shipped templates once per process."""
    templates = {}
    if Path(root).is_dir():
        for child in sorted(Path(root).iterdir()):
            if child.is_dir():
                templates[child.name] = EmbeddedTemplate(child.name, read_tree(child))
    logger.debug("Loaded %d embedded templates from %s", len(templates), root)
    return MappingProxyType(templates)
