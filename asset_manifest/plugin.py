"""Adapter that hooks the manifest builder into a bundler's plugin API."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from asset_manifest.app.builder import ManifestBuilder, default_template
from asset_manifest.framework.build import BuildOptions, BuildResult
from asset_manifest.framework.config import ManifestOptions

PLUGIN_NAME = "manifest"


class PluginBuild(Protocol):
    """What the host exposes to a plugin during setup."""

    initial_options: BuildOptions

    def on_end(self, callback: Callable[[BuildResult], Any]) -> None: ...


@dataclass
class ManifestPlugin:
    options: ManifestOptions = field(default_factory=ManifestOptions)
    logger: logging.Logger | None = None
    name: str = PLUGIN_NAME

    def setup(self, build: PluginBuild) -> ManifestBuilder:
        initial = build.initial_options
        initial.metafile = True

        # Templates the user set explicitly are never overridden.
        fallback = default_template(self.options)
        if not initial.entry_names:
            initial.entry_names = fallback
        if not initial.asset_names:
            initial.asset_names = fallback

        builder = ManifestBuilder(self.options, initial, logger=self.logger)
        build.on_end(builder.run)
        return builder


def manifest_plugin(options: ManifestOptions | None = None, **overrides: Any) -> ManifestPlugin:
    """
    Create the manifest plugin.

    Keyword arguments override fields of `options` (or of the defaults), e.g.
    ``manifest_plugin(hash=False, short_names="input")``.
    """

    base = options or ManifestOptions()
    if overrides:
        base = base.with_overrides(**overrides)
    return ManifestPlugin(options=base)
