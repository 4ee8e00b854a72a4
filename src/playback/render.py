"""Text and matplotlib renderers for :class:`BoardView` frames."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Dict, List, Optional

from .projector import BoardView

HIGHLIGHT_COLOURS: Dict[str, str] = {
    "assign": "#b7e4c7",
    "conflict": "#f4a6a6",
    "backtrack": "#ffd8a8",
}
_DEFAULT_HIGHLIGHT = "#cfe2ff"
_TEXT_MARKERS = {"assign": "[]", "conflict": "!!", "backtrack": "<>"}


def _block_size(size: int) -> int:
    root = math.isqrt(size)
    return root if root * root == size else size


def render_text(view: BoardView, *, caption: Optional[str] = None) -> str:
    """Render *view* as a monospace board; the highlighted cell is wrapped in action markers."""

    if view.size == 0:
        return caption or ""
    block = _block_size(view.size)
    lines: List[str] = []
    separator = "+".join(["-" * (3 * block)] * (view.size // block))
    for row_index, row in enumerate(view.rows()):
        if row_index and row_index % block == 0:
            lines.append(separator)
        parts: List[str] = []
        for col_index, cell in enumerate(row):
            if col_index and col_index % block == 0:
                parts.append("|")
            glyph = "." if cell.empty else str(cell.value)
            if cell.highlighted:
                left, right = _TEXT_MARKERS.get(cell.action_type or "", "**")
                parts.append(f"{left}{glyph}{right}")
            else:
                parts.append(f" {glyph} ")
        lines.append("".join(parts))
    if caption:
        lines.append(caption)
    return "\n".join(lines)


def draw_board(ax, view: BoardView, *, title: Optional[str] = None) -> None:
    """Draw *view* on a matplotlib axes using unit coordinates."""

    from matplotlib.patches import Rectangle

    size = view.size
    block = _block_size(size)
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_aspect("equal")
    ax.axis("off")
    if size == 0:
        return

    highlight = view.highlight
    if highlight is not None and 0 <= highlight.row < size and 0 <= highlight.col < size:
        colour = HIGHLIGHT_COLOURS.get(highlight.action_type, _DEFAULT_HIGHLIGHT)
        ax.add_patch(
            Rectangle(
                (highlight.col / size, 1 - (highlight.row + 1) / size),
                1 / size,
                1 / size,
                facecolor=colour,
                edgecolor="none",
            )
        )

    for i in range(size + 1):
        lw = 2.5 if i % block == 0 else 0.8
        ax.axvline(i / size, color="k", linewidth=lw)
        ax.axhline(i / size, color="k", linewidth=lw)

    for cell in view.cells:
        if cell.empty:
            continue
        x = (cell.col + 0.5) / size
        y = 1 - (cell.row + 0.5) / size
        ax.text(x, y, str(cell.value), ha="center", va="center", fontsize=max(6, 160 // size))

    if title:
        ax.set_title(title, fontsize=9)


def save_board_image(view: BoardView, out_path: str | Path, *, title: Optional[str] = None, size_in: float = 5.0) -> Path:
    """Render *view* into an image file (format chosen from the suffix)."""

    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    out = Path(out_path)
    fig, ax = plt.subplots(figsize=(size_in, size_in))
    try:
        draw_board(ax, view, title=title)
        fig.savefig(out, bbox_inches="tight")
    finally:
        plt.close(fig)
    return out


__all__ = ["HIGHLIGHT_COLOURS", "draw_board", "render_text", "save_board_image"]
