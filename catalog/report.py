"""Plain-text statistics report printed after a manifest build."""
from __future__ import annotations

from typing import List

from .levels import LEVEL_RANGE, to_access_level
from .types import BuildStats, LevelHistogram


def _level_lines(title: str, histogram: LevelHistogram, prefix: str) -> List[str]:
    if histogram.total == 0:
        return []
    lines = ["", f"{title} total: {histogram.total}"]
    for level in LEVEL_RANGE:
        count = histogram.levels[level]
        if count > 0:
            lines.append(f"  - Level {to_access_level(level)} ({prefix}{level}): {count}")
    return lines


def format_report(stats: BuildStats) -> str:
    lines = [
        "",
        "=== Build Statistics ===",
        f"Total folders: {stats.total_folders}",
        f"Total files: {stats.total_files}",
        "Files by type:",
    ]
    typed = [(ext, count) for ext, count in stats.file_types.items() if count > 0]
    if typed:
        lines.extend(f"  - {ext.upper()}: {count}" for ext, count in typed)
    else:
        lines.append("  (none found)")
    lines.extend(_level_lines("Hidden folders", stats.hidden_folders, "hidden"))
    lines.extend(_level_lines("Hidden files", stats.hidden_files, "hidden"))
    lines.extend(_level_lines("Locked files", stats.locked_files, "locked"))
    lines.append("========================")
    return "\n".join(lines) + "\n"


__all__ = ["format_report"]
