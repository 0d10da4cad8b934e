"""Manifest key derivation under the configured naming policy.

Side options apply to the key (input side) or to the recorded output path
(output side); the recorded `source` is never rewritten. Transforms run in
a fixed order: relative, short names, extensionless.
"""

from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass

from asset_manifest.framework.config import NamingPolicy, SideSelection

SOURCEMAP_SUFFIX = ".map"


def _posix(path: str) -> str:
    return path.replace("\\", "/")


def make_relative(path: str, outdir: str | None) -> str:
    """Drop the output directory prefix, keeping the leading separator.

    Bundler output paths are usually relative to the working directory while
    `outdir` may be absolute (or the reverse); the prefix is then resolved
    against the working directory before comparing.
    """

    if not outdir:
        return path
    prefix = outdir.rstrip("/")
    if prefix and os.path.isabs(prefix) != os.path.isabs(path):
        resolved = os.path.abspath(prefix) if os.path.isabs(path) else os.path.relpath(prefix)
        prefix = _posix(resolved).rstrip("/")
    if prefix and path.startswith(prefix + "/"):
        return path[len(prefix) :]
    return path


def short_name(path: str) -> str:
    return posixpath.basename(path)


def drop_extension(path: str) -> str:
    """Remove every extension of the basename; a trailing ``.map`` survives."""

    if path.endswith(SOURCEMAP_SUFFIX):
        return drop_extension(path[: -len(SOURCEMAP_SUFFIX)]) + SOURCEMAP_SUFFIX
    directory, base = posixpath.split(path)
    dot = base.find(".", 1)
    if dot == -1:
        return path
    return posixpath.join(directory, base[:dot]) if directory else base[:dot]


def replace_extension(path: str, extension: str) -> str:
    root, _ext = posixpath.splitext(path)
    return root + extension


@dataclass(frozen=True)
class ResolvedPaths:
    key: str
    source: str
    file: str


class KeyResolver:
    def __init__(self, policy: NamingPolicy, *, outdir: str | None) -> None:
        self.policy = policy
        self.outdir = posixpath.normpath(_posix(outdir)) if outdir else None

    def _apply(self, path: str, *, side: str) -> str:
        def selected(selection: SideSelection) -> bool:
            return selection.input if side == "input" else selection.output

        if selected(self.policy.relative):
            path = make_relative(path, self.outdir)
        if selected(self.policy.short_names):
            path = short_name(path)
        if selected(self.policy.extensionless):
            path = drop_extension(path)
        return path

    def resolve(self, output_path: str, *, source: str, entry_key: str | None = None) -> ResolvedPaths:
        """
        Compute key, source and file for one output.

        Args:
            output_path: Path actually written by the bundler.
            source: The output path with its hash removed (or unchanged when
                hashing is off).
            entry_key: Declared entry point path, used as key and source when
                `use_entrypoint_keys` is on.
        """

        basis = source
        if self.policy.use_entrypoint_keys and entry_key:
            basis = entry_key
        return ResolvedPaths(
            key=self._apply(basis, side="input"),
            source=basis,
            file=self._apply(output_path, side="output"),
        )
