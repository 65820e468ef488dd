"""Deterministic categorical palette for chart series and pie wedges."""
from __future__ import annotations

from typing import List

BASE_PALETTE = (
    "#8884d8",
    "#82ca9d",
    "#ffc658",
    "#ff8042",
    "#0088fe",
    "#00c49f",
    "#ffbb28",
    "#d0587e",
    "#a4de6c",
    "#d0ed57",
    "#83a6ed",
    "#8dd1e1",
)
# Hex alpha suffix marking the reduced-opacity (~60%) variant of a base color.
VARIANT_ALPHA = "99"


def generate_palette(count: int) -> List[str]:
    """Return `count` colors; smaller requests are prefixes of larger ones."""
    if count < 0:
        raise ValueError(f"palette size must be non-negative, got {count}")
    size = len(BASE_PALETTE)
    colors: List[str] = []
    for index in range(count):
        color = BASE_PALETTE[index % size]
        if index >= size:
            color = f"{color}{VARIANT_ALPHA}"
        colors.append(color)
    return colors


def pick_color(palette: List[str], index: int) -> str:
    return palette[index % len(palette)]
