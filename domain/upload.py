"""
In-memory representation of an uploaded contract document.
"""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class UploadedFile:
    name: str
    content: bytes
    media_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def suffix(self) -> str:
        return Path(self.name).suffix.lower()

    @classmethod
    def from_path(cls, path: Path) -> "UploadedFile":
        """Read a file from disk, guessing its media type from the extension."""
        path = path.expanduser().resolve()
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        media_type, _ = mimetypes.guess_type(str(path))
        return cls(name=path.name, content=path.read_bytes(), media_type=media_type)
