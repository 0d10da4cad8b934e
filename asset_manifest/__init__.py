"""Build manifests that map logical asset names to hashed bundler outputs."""

from asset_manifest.app.builder import ManifestBuilder, ManifestRun
from asset_manifest.errors import (
    ConfigurationError,
    IncompatibleOptionsError,
    ManifestError,
    ManifestKeyConflictError,
    ManifestLockTimeoutError,
    UnsupportedTemplateError,
)
from asset_manifest.framework.build import (
    BuildMessage,
    BuildOptions,
    BuildOutput,
    BuildResult,
    OutputFile,
    load_metafile,
)
from asset_manifest.framework.config import ManifestOptions, NamingPolicy
from asset_manifest.plugin import ManifestPlugin, manifest_plugin

__all__ = [
    "BuildMessage",
    "BuildOptions",
    "BuildOutput",
    "BuildResult",
    "ConfigurationError",
    "IncompatibleOptionsError",
    "ManifestBuilder",
    "ManifestError",
    "ManifestKeyConflictError",
    "ManifestLockTimeoutError",
    "ManifestOptions",
    "ManifestPlugin",
    "ManifestRun",
    "NamingPolicy",
    "OutputFile",
    "UnsupportedTemplateError",
    "load_metafile",
    "manifest_plugin",
]
