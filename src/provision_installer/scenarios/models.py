"""Data models for scenario definitions."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Scenario:
    """Scenario definition discovered on disk. Identity is the resolved file path."""
    source_path: Path
    name: str
    answer_file: str
    description: Optional[str] = None

    @classmethod
    def from_data(cls, source_path: Path, data: Dict[str, Any]) -> Scenario:
        """Build a scenario from parsed file content.

        Legacy files without a ``name`` are named after the file.
        """
        name = data.get("name") or Path(source_path).stem
        description = data.get("description")
        return cls(
            source_path=Path(source_path).resolve(),
            name=str(name),
            answer_file=str(data["answer_file"]),
            description=str(description) if description else None,
        )

    @property
    def key(self) -> str:
        """Name usable with ``--scenario``."""
        return self.source_path.stem
