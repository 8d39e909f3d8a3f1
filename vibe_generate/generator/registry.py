"""Template discovery.

Exactly one backend serves a given run: a configured or discovered
``templates/`` directory on disk, or else the templates shipped with the
package. The two are never merged, so a template name always means one tree.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from ..utils.config import Settings
from .errors import ConfigError, NoTemplatesAvailable, TemplateNotFound
from .source import (
    EmbeddedTemplate,
    FilesystemTemplate,
    Origin,
    TemplateSource,
    load_embedded,
)

logger = logging.getLogger(__name__)

TEMPLATES_DIRNAME = "templates"
DEFAULT_SEARCH_DEPTH = 64


@dataclass(frozen=True)
class TemplateDescriptor:
    name: str
    origin: Origin
    root: Optional[Path] = None


def find_templates_root(
    start: Optional[Path] = None, max_depth: int = DEFAULT_SEARCH_DEPTH
) -> Optional[Path]:
    """Walk up from ``start`` (default: cwd) looking for a ``templates/`` dir.

    Stops at the first match, at the filesystem root, or after ``max_depth``
    directories have been checked.
    """
    current = Path(start or Path.cwd()).resolve()
    for _ in range(max_depth):
        candidate = current / TEMPLATES_DIRNAME
        if candidate.is_dir():
            return candidate
        if current.parent == current:
            break
        current = current.parent
    return None


class FilesystemBackend:
    origin = Origin.FILESYSTEM

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _templates(self) -> Dict[str, FilesystemTemplate]:
        return {
            child.name: FilesystemTemplate(child.name, child)
            for child in sorted(self.root.iterdir())
            if child.is_dir()
        }

    def descriptors(self) -> List[TemplateDescriptor]:
        return [
            TemplateDescriptor(name, self.origin, t.root)
            for name, t in self._templates().items()
        ]

    def get(self, name: str) -> Optional[TemplateSource]:
        return self._templates().get(name)

    def __str__(self) -> str:
        return str(self.root)


class EmbeddedBackend:
    origin = Origin.EMBEDDED

    def __init__(self, templates: Optional[Mapping[str, EmbeddedTemplate]] = None) -> None:
        self.templates = load_embedded() if templates is None else templates

    def descriptors(self) -> List[TemplateDescriptor]:
        return [TemplateDescriptor(name, self.origin) for name in sorted(self.templates)]

    def get(self, name: str) -> Optional[TemplateSource]:
        return self.templates.get(name)

    def __str__(self) -> str:
        return "embedded templates"


class TemplateRegistry:
    def __init__(self, backend) -> None:
        self.backend = backend

    @classmethod
    def discover(
        cls,
        settings: Optional[Settings] = None,
        start: Optional[Path] = None,
        embedded: Optional[Mapping[str, EmbeddedTemplate]] = None,
    ) -> "TemplateRegistry":
        """Pick the backend for this run.

        A configured ``templates_dir`` wins, then a ``templates/`` directory
        found above ``start``, then the embedded set.
        """
        settings = settings or Settings()
        if settings.templates_dir is not None:
            if not settings.templates_dir.is_dir():
                raise ConfigError(
                    f"Configured templates_dir is not a directory: {settings.templates_dir}"
                )
            logger.info("Using configured templates at %s", settings.templates_dir)
            return cls(FilesystemBackend(settings.templates_dir))

        root = find_templates_root(start, settings.search_depth)
        if root is not None:
            logger.info("Using templates from %s", root)
            return cls(FilesystemBackend(root))

        logger.info("Using embedded templates")
        return cls(EmbeddedBackend(embedded))

    @property
    def origin(self) -> Origin:
        return self.backend.origin

    def list(self) -> List[TemplateDescriptor]:
        return sorted(self.backend.descriptors(), key=lambda d: d.name)

    def names(self) -> List[str]:
        return [d.name for d in self.list()]

    def resolve(self, name: str) -> TemplateSource:
        source = self.backend.get(name)
        if source is not None:
            return source
        available = self.names()
        if not available:
            raise NoTemplatesAvailable(str(self.backend))
        raise TemplateNotFound(name, available)
