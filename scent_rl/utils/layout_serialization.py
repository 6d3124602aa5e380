"""
Layout serialization utilities for saving and loading grids as JSON.
Only layouts are stored; learned tables live for the process lifetime.
"""

import json
import os
from datetime import datetime
from typing import Any, Dict, Optional

from ..domain.neighbors import in_bounds, is_wall, validate_layout
from ..domain.types import Coord, Layout

FORMAT_VERSION = "1.0"


class LayoutData:
    """Container for a layout with its start cell and metadata."""

    def __init__(self, layout: Layout, start: Coord, name: str = "", description: str = ""):
        validate_layout(layout)
        if not in_bounds(layout, *start) or is_wall(layout, *start):
            raise ValueError(f"Start position {start} is not an open cell")
        self.layout = [list(row) for row in layout]
        self.start = tuple(start)
        self.name = name
        self.description = description
        self.created_at = datetime.now().isoformat()

    @property
    def rows(self) -> int:
        return len(self.layout)

    @property
    def cols(self) -> int:
        return len(self.layout[0])

    def to_dict(self) -> Dict[str, Any]:
        """Convert layout data to dictionary for serialization."""
        return {
            'rows': self.rows,
            'cols': self.cols,
            'cells': self.layout,
            'start': list(self.start),
            'name': self.name,
            'description': self.description,
            'created_at': self.created_at,
            'version': FORMAT_VERSION
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LayoutData':
        """Create layout data from dictionary."""
        missing = [key for key in ('cells', 'start') if key not in data]
        if missing:
            raise ValueError(f"Layout data is missing keys: {', '.join(missing)}")

        layout_data = cls(
            layout=data['cells'],
            start=tuple(data['start']),
            name=data.get('name', ''),
            description=data.get('description', '')
        )
        layout_data.created_at = data.get('created_at', layout_data.created_at)
        return layout_data


def save_layout(layout_data: LayoutData, filepath: str) -> None:
    """Save layout data to a JSON file, creating the directory if needed."""
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(filepath, 'w', encoding='utf-8') as f:
        json.dump(layout_data.to_dict(), f, indent=2)


def load_layout(filepath: str) -> LayoutData:
    """Load layout data from a JSON file."""
    with open(filepath, 'r', encoding='utf-8') as f:
        data = json.load(f)
    return LayoutData.from_dict(data)


def layout_name(layout_data: LayoutData, fallback: Optional[str] = None) -> str:
    """Display name for a layout."""
    return layout_data.name or fallback or f"layout_{layout_data.rows}x{layout_data.cols}"
