"""Build records handed over by the bundler once a build has finished."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from asset_manifest.errors import ManifestError


@dataclass(frozen=True)
class BuildOutput:
    """One written file. `contents=None` means read it from `path` when needed."""

    path: str
    inputs: tuple[str, ...] = ()
    entry_point: str | None = None
    contents: bytes | None = field(default=None, repr=False, compare=False)

    @property
    def is_stylesheet(self) -> bool:
        return self.path.endswith(".css")

    @property
    def is_sourcemap(self) -> bool:
        return self.path.endswith(".map")


@dataclass(frozen=True)
class BuildMessage:
    text: str


@dataclass(frozen=True)
class OutputFile:
    path: str
    contents: bytes = field(repr=False)

    @property
    def text(self) -> str:
        return self.contents.decode("utf-8")


@dataclass
class BuildOptions:
    """The subset of bundler options the manifest step depends on."""

    outdir: str | None = None
    outfile: str | None = None
    entry_names: str | None = None
    asset_names: str | None = None
    write: bool = True
    metafile: bool = False


@dataclass
class BuildResult:
    outputs: list[BuildOutput] = field(default_factory=list)
    errors: list[BuildMessage] = field(default_factory=list)
    output_files: list[OutputFile] | None = None


def _normalize_path(path: str) -> str:
    return path.replace("\\", "/")


def outputs_from_metafile(payload: Mapping[str, Any]) -> list[BuildOutput]:
    """
    Convert an esbuild-style metafile into `BuildOutput` records.

    Only the ``outputs`` section is used; each output keeps its ``entryPoint``
    and the keys of its ``inputs`` mapping in metafile order.
    """

    outputs = payload.get("outputs")
    if not isinstance(outputs, Mapping):
        raise ManifestError("Metafile is missing an 'outputs' mapping")

    records: list[BuildOutput] = []
    for path, info in outputs.items():
        if not isinstance(info, Mapping):
            raise ManifestError(f"Metafile output {path!r} must be a mapping")
        inputs = info.get("inputs") or {}
        if not isinstance(inputs, Mapping):
            raise ManifestError(f"Metafile output {path!r} has invalid 'inputs'")
        entry_point = info.get("entryPoint")
        records.append(
            BuildOutput(
                path=_normalize_path(str(path)),
                inputs=tuple(_normalize_path(str(item)) for item in inputs.keys()),
                entry_point=_normalize_path(str(entry_point)) if entry_point else None,
            )
        )
    return records


def load_metafile(path: str | os.PathLike[str] | Mapping[str, Any]) -> list[BuildOutput]:
    if isinstance(path, Mapping):
        return outputs_from_metafile(path)
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Invalid metafile JSON in {path}: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise ManifestError(f"Metafile must contain a JSON object: {path}")
    return outputs_from_metafile(payload)
