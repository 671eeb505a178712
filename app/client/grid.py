from __future__ import annotations

import textwrap

from app.schemas.files import FileOut


_BADGES = {"image": "[IMG]", "video": "[VID]", "audio": "[AUD]"}


def _card(item: FileOut, width: int) -> list[str]:
    badge = _BADGES.get(item.file_type, "[???]")
    lines = textwrap.wrap(f"{badge} {item.file_name}", width=width) or [badge]
    lines.append(f"#{item.id} {item.mime_type}"[:width])
    lines.append(item.created_at[:width])
    if item.url:
        lines.extend(textwrap.wrap(item.url, width=width, break_on_hyphens=False))
    else:
        lines.append("(file unavailable)")
    return lines


def render_grid(files: list[FileOut], *, columns: int = 3, width: int = 32) -> str:
    """Lay cards out masonry-style: each card goes to the currently shortest column."""
    if not files:
        return "No files uploaded yet."

    columns = max(1, columns)
    stacks: list[list[str]] = [[] for _ in range(columns)]
    for item in files:
        target = min(stacks, key=len)
        if target:
            target.append("")
        target.extend(_card(item, width))

    height = max(len(stack) for stack in stacks)
    rows = []
    for i in range(height):
        cells = [(stack[i] if i < len(stack) else "").ljust(width) for stack in stacks]
        rows.append("  ".join(cells).rstrip())
    return f"Your Files ({len(files)})\n\n" + "\n".join(rows)
