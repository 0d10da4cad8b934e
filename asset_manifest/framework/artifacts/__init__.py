"""Manifest file helpers (locking, merging, atomic writes)."""

from .manifest import (
    ManifestStore,
    manifest_lock,
    merge_manifest,
    read_manifest,
    serialize_manifest,
    utc_now_iso8601,
)

__all__ = [
    "ManifestStore",
    "manifest_lock",
    "merge_manifest",
    "read_manifest",
    "serialize_manifest",
    "utc_now_iso8601",
]
