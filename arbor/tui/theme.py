from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Theme:
    """Colors for the terminal UI. The graph engine only hands out column
    indices; picking a color for them happens here."""

    background: str = "#10150f"
    background_alt: str = "#151c16"
    panel: str = "#141b17"
    panel_border: str = "#2e3b33"
    text: str = "#e4eee4"
    text_muted: str = "#a3b1a4"
    text_dim: str = "#788579"
    accent: str = "#72cf8c"
    accent_alt: str = "#d4a86b"
    highlight_background: str = "#274c38"
    highlight_text: str = "#ebf6ee"
    bar_background: str = "#19231e"
    branch_colors: Tuple[str, ...] = (
        "#72cf8c",
        "#80e0a2",
        "#d4a86b",
        "#80d2c4",
        "#90b8df",
        "#efbf7b",
        "#a9de66",
        "#6daf8b",
        "#aab5af",
    )

    def branch_color(self, color_index: int) -> str:
        return self.branch_colors[color_index % len(self.branch_colors)]


DEFAULT_THEME = Theme()
