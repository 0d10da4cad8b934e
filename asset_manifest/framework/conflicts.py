from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from asset_manifest.errors import ManifestKeyConflictError


@dataclass(frozen=True)
class ManifestEntry:
    file: str
    source: str
    etag: str
    integrity: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "source": self.source,
            "etag": self.etag,
            "integrity": self.integrity,
        }


def _describe(entry: ManifestEntry, other: ManifestEntry) -> str:
    if entry.source == other.source:
        return f"{entry.source} ({entry.file})"
    return entry.source


class ConflictDetector:
    """Collects key assignments for one build and rejects collisions."""

    def __init__(self) -> None:
        self._assigned: dict[str, ManifestEntry] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._assigned

    def __len__(self) -> int:
        return len(self._assigned)

    def assign(self, key: str, entry: ManifestEntry) -> None:
        existing = self._assigned.get(key)
        if existing is None:
            self._assigned[key] = entry
            return
        if existing == entry:
            return
        raise ManifestKeyConflictError(key, _describe(existing, entry), _describe(entry, existing))

    def entries(self) -> dict[str, dict[str, Any]]:
        return {key: entry.to_dict() for key, entry in self._assigned.items()}
