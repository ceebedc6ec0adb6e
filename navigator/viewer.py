"""File view model: what the viewer should show for one catalog file.

Rendering (markdown, image decoding, audio playback) happens elsewhere; this
module only decides the content type, applies the lock gate and loads text.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from catalog.access import is_unlocked
from catalog.levels import level_name
from catalog.types import FileEntry

from .sources import DescriptorSource

IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "webp", "svg"})
AUDIO_EXTENSIONS = frozenset({"mp3", "wav", "ogg", "m4a", "webm", "flac"})

STATUS_OK = "ok"
STATUS_DENIED = "denied"
STATUS_FAILED = "failed"


def file_type(name: str) -> str:
    """Classify by extension: ``image``, ``audio``, ``md`` or ``txt`` (the default)."""

    ext = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    if ext in IMAGE_EXTENSIONS:
        return "image"
    if ext in AUDIO_EXTENSIONS:
        return "audio"
    if ext == "md":
        return "md"
    return "txt"


@dataclass(slots=True)
class FileContent:
    name: str
    path: str
    file_type: str
    status: str = STATUS_OK
    text: Optional[str] = None
    blurred: bool = False
    message: Optional[str] = None
    required_level: int = 0

    @property
    def header(self) -> str:
        folder, _, _ = self.path.rpartition("/")
        return f"{folder}/" if folder else ""


def denied_message(locked_level: int) -> str:
    return f"Access Denied: {level_name(locked_level)} Required"


async def load_file_content(
    source: DescriptorSource,
    parts: Sequence[str],
    entry: FileEntry,
    special_access_level: int,
) -> FileContent:
    kind = file_type(entry.name)
    path = "/".join([*parts, entry.name])
    content = FileContent(name=entry.name, path=path, file_type=kind)
    if not is_unlocked(entry.locked_level, special_access_level):
        content.required_level = entry.locked_level
        content.message = denied_message(entry.locked_level)
        if kind == "image":
            # still shown, but blurred under the denial overlay
            content.blurred = True
        else:
            content.status = STATUS_DENIED
        return content
    if kind in {"image", "audio"}:
        return content

    data = await source.read_file(parts, entry.name)
    if data is None:
        content.status = STATUS_FAILED
        content.message = "Failed to load file: not found or unreadable"
        return content
    content.text = data.decode("utf-8", errors="replace")
    return content


__all__ = [
    "AUDIO_EXTENSIONS",
    "FileContent",
    "IMAGE_EXTENSIONS",
    "STATUS_DENIED",
    "STATUS_FAILED",
    "STATUS_OK",
    "denied_message",
    "file_type",
    "load_file_content",
]
