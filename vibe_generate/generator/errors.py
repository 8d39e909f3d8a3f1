from pathlib import Path
from typing import Iterable, Sequence


class VibeGenerateError(Exception):
    """Base class for every failure the generator reports to the user."""


class ConfigError(VibeGenerateError):
    pass


class ResolutionError(VibeGenerateError):
    pass


class TemplateNotFound(ResolutionError):
    def __init__(self, name: str, available: Iterable[str] = ()) -> None:
        self.name = name
        self.available = list(available)
        msg = f'Unknown template "{name}".'
        if self.available:
            msg += f" Available: {', '.join(self.available)}"
        super().__init__(msg)


class NoTemplatesAvailable(ResolutionError):
    def __init__(self, where: str | None = None) -> None:
        self.where = where
        super().__init__(f"No templates found in {where}" if where else "No templates found")


class ScaffoldError(VibeGenerateError):
    # True when the failure happened after the first write.
    partial = False


class DestinationExists(ScaffoldError):
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(f"Destination already exists and is not empty: {self.path}")


class PathEscape(ScaffoldError):
    def __init__(self, relative_path: Sequence[str] | str) -> None:
        if not isinstance(relative_path, str):
            relative_path = "/".join(relative_path)
        self.relative_path = relative_path
        super().__init__(f"Template path escapes the destination: {relative_path}")


class PathCollision(ScaffoldError):
    def __init__(self, relative_path: str) -> None:
        self.relative_path = relative_path
        super().__init__(f"Two template entries map to the same output path: {relative_path}")


class ScaffoldIOError(ScaffoldError):
    def __init__(self, path: Path, cause: OSError, partial: bool = True) -> None:
        self.path = Path(path)
        self.cause = cause
        self.partial = partial
        reason = cause.strerror or str(cause)
        super().__init__(f"Failed to write {self.path}: {reason}")


class SelectionCancelled(Exception):
    """The user backed out of the interactive template choice.

    Not a :class:`VibeGenerateError`: cancelling is a normal outcome, and the
    CLI reports it with its own exit code.
    """
