from pathlib import Path

from vibe_generate.generator.source import EmbeddedTemplate, EntryKind, TemplateEntry


def write_tree(root: Path, files: dict) -> Path:
    for rel, content in files.items():
        path = root / rel
        if rel.endswith("/"):
            path.mkdir(parents=True, exist_ok=True)
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


def snapshot(root: Path) -> dict:
    out = {}
    for p in sorted(root.rglob("*")):
        rel = p.relative_to(root).as_posix()
        out[rel] = p.read_bytes() if p.is_file() else None
    return out


def make_template(name: str, files: dict) -> EmbeddedTemplate:
    """Build an in-memory template from ``{"dir/file.txt": content}``.

    Parent directories are implied by the file paths; a key ending in ``/``
    declares an (otherwise empty) directory.
    """
    entries = {}
    for rel, content in files.items():
        parts = tuple(rel.rstrip("/").split("/"))
        for i in range(1, len(parts)):
            entries.setdefault(parts[:i], TemplateEntry(parts[:i], EntryKind.DIRECTORY))
        if rel.endswith("/"):
            entries[parts] = TemplateEntry(parts, EntryKind.DIRECTORY)
            continue
        if isinstance(content, str):
            content = content.encode("utf-8")
        entries[parts] = TemplateEntry(parts, EntryKind.FILE, content)
    return EmbeddedTemplate(name, tuple(entries.values()))
