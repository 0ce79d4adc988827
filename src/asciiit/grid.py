from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Cell:
    character: str
    color: tuple[int, int, int] | None = None  # raw source RGB, only when colour is enabled
    opacity: float | None = None  # A/255, only when alpha-as-opacity is enabled

    @property
    def styled(self) -> bool:
        return self.color is not None or self.opacity is not None


@dataclass(frozen=True)
class CharacterGrid:
    rows: tuple[tuple[Cell, ...], ...]

    def __post_init__(self):
        widths = {len(row) for row in self.rows}
        if len(widths) > 1:
            raise ValueError(f"All rows must have the same length, got {sorted(widths)}")

    @classmethod
    def from_text(cls, text: str) -> CharacterGrid:
        """Unstyled grid from newline-separated rows, padded with spaces to a common width."""
        lines = text.split("\n")
        width = max((len(line) for line in lines), default=0)
        return cls(rows=tuple(tuple(Cell(ch) for ch in line.ljust(width)) for line in lines))

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.rows[0]) if self.rows else 0

    @property
    def lines(self) -> list[str]:
        """One string of glyphs per row."""
        return ["".join(cell.character for cell in row) for row in self.rows]

    @property
    def plain(self) -> str:
        """Glyphs only, rows separated by newlines. This is what gets copied to the clipboard."""
        return "\n".join(self.lines)

    @property
    def is_blank(self) -> bool:
        return not any(line.strip() for line in self.lines)
