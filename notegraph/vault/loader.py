"""Load note sets from a markdown folder or a JSON backup."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import frontmatter

from ..models import Note
from .parser import unique_tags

logger = logging.getLogger(__name__)

DEFAULT_FOLDERS = ["Inbox", "Notes", "Projects"]


@dataclass
class Vault:
    """Container for a loaded note set."""

    path: Path
    notes: list[Note] = field(default_factory=list)
    folders: list[str] = field(default_factory=list)

    # Lookup table built after loading
    _by_id: dict[str, Note] = field(default_factory=dict)

    def __post_init__(self):
        self._build_lookups()

    def _build_lookups(self):
        self._by_id = {note.id: note for note in self.notes}

    def get(self, note_id: str) -> Note | None:
        return self._by_id.get(note_id)

    def find_title(self, title: str) -> Note | None:
        """Last note whose title matches case-insensitively."""
        key = title.casefold()
        found = None
        for note in self.notes:
            if note.title.casefold() == key:
                found = note
        return found


def _title_from_content(content: str) -> str | None:
    for line in content.split("\n"):
        if line.startswith("# "):
            return line[2:].strip() or None
    return None


def _infer_folder(path: Path, vault_path: Path) -> str | None:
    try:
        parts = path.relative_to(vault_path).parts
    except ValueError:
        return None
    return parts[0] if len(parts) > 1 else None


def _millis(value: Any, fallback: float) -> int:
    if isinstance(value, bool):
        return int(fallback * 1000)
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, datetime):
        return int(value.timestamp() * 1000)
    return int(fallback * 1000)


def load_note(path: Path, vault_path: Path) -> Note:
    """Load a single markdown file and parse its frontmatter."""
    post = frontmatter.load(path)
    content = post.content
    fm = post.metadata
    mtime = path.stat().st_mtime

    title = str(fm.get("title") or _title_from_content(content) or path.stem)
    folder = str(fm.get("folder") or _infer_folder(path, vault_path) or "Inbox")
    note_id = str(fm.get("id") or path.relative_to(vault_path).with_suffix("").as_posix())

    tags = fm.get("tags")
    if isinstance(tags, str):
        tags = [tags]
    if not isinstance(tags, list):
        tags = unique_tags(content)

    return Note(
        id=note_id,
        title=title,
        content=content,
        folder=folder,
        tags=tuple(str(t) for t in tags),
        created_at=_millis(fm.get("created"), mtime),
        updated_at=_millis(fm.get("updated"), mtime),
    )


def load_vault(vault_path: Path) -> Vault:
    """Load all markdown files below a folder, or a JSON backup file.

    Hidden files and folders are skipped. Files that fail to parse are
    logged and skipped.
    """
    if vault_path.is_file():
        return load_backup(vault_path)

    notes: list[Note] = []
    folders: list[str] = []
    for md_file in sorted(vault_path.rglob("*.md")):
        rel_parts = md_file.relative_to(vault_path).parts
        if any(part.startswith(".") for part in rel_parts):
            continue
        try:
            note = load_note(md_file, vault_path)
        except Exception as e:
            logger.warning("Failed to load %s: %s", md_file, e)
            continue
        notes.append(note)
        if note.folder not in folders:
            folders.append(note.folder)

    return Vault(path=vault_path, notes=notes, folders=folders)


def _note_from_dict(raw: dict[str, Any]) -> Note | None:
    note_id = raw.get("id")
    title = raw.get("title")
    if not isinstance(note_id, (str, int)) or not isinstance(title, str):
        return None
    content = raw.get("content")
    content = content if isinstance(content, str) else ""
    tags = raw.get("tags")
    if not isinstance(tags, list):
        tags = unique_tags(content)
    return Note(
        id=str(note_id),
        title=title,
        content=content,
        folder=str(raw.get("folder") or "Inbox"),
        tags=tuple(str(t) for t in tags),
        created_at=_millis(raw.get("createdAt"), 0.0),
        updated_at=_millis(raw.get("updatedAt"), 0.0),
    )


def load_backup(path: Path) -> Vault:
    """Load a JSON export (``{"notes": [...], "folders": [...]}``).

    Malformed note entries are skipped; a later entry with the same id
    replaces an earlier one. A file that is not valid JSON, or whose
    ``notes``/``folders`` are not lists, raises ``ValueError``.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON backup {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid JSON backup {path}: expected an object")

    raw_notes = data.get("notes") or []
    raw_folders = data.get("folders") or []
    for key, value in (("notes", raw_notes), ("folders", raw_folders)):
        if not isinstance(value, list):
            raise ValueError(f"Invalid JSON backup {path}: {key!r} must be a list")

    by_id: dict[str, Note] = {}
    skipped = 0
    for raw in raw_notes:
        note = _note_from_dict(raw) if isinstance(raw, dict) else None
        if note is None:
            skipped += 1
            continue
        by_id[note.id] = note
    if skipped:
        logger.warning("Skipped %d malformed note entries in %s", skipped, path)

    folders = [str(f) for f in raw_folders if isinstance(f, str)]
    for note in by_id.values():
        if note.folder not in folders:
            folders.append(note.folder)

    return Vault(path=path, notes=list(by_id.values()), folders=folders or list(DEFAULT_FOLDERS))
