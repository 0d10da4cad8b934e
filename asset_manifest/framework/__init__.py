"""Manifest resolution engine.

This package holds the pieces that turn build outputs into manifest entries
(template matching, hashing, key policy, sibling pairing, conflict detection)
and the manifest store. It is intentionally independent of `asset_manifest.app`
and of any bundler host.

Common entrypoints:

- `asset_manifest.framework.templates`: hash location inside generated filenames
- `asset_manifest.framework.artifacts`: manifest load/merge/lock/persist
"""
