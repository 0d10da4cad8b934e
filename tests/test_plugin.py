import json
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from asset_manifest.errors import ConfigurationError, IncompatibleOptionsError
from asset_manifest.framework.build import BuildMessage, BuildOptions, BuildOutput, BuildResult
from asset_manifest.framework.config import ManifestOptions
from asset_manifest.plugin import ManifestPlugin, manifest_plugin


@dataclass
class FakeBuild:
    initial_options: BuildOptions
    callbacks: list = field(default_factory=list)

    def on_end(self, callback) -> None:
        self.callbacks.append(callback)

    def finish(self, result: BuildResult):
        return [callback(result) for callback in self.callbacks]


def test_plugin_is_named_manifest():
    assert manifest_plugin().name == "manifest"


def test_setup_enables_metafile_and_fills_default_templates():
    build = FakeBuild(BuildOptions(outdir="dist"))

    manifest_plugin().setup(build)

    assert build.initial_options.metafile is True
    assert build.initial_options.entry_names == "[dir]/[name]-[hash]"
    assert build.initial_options.asset_names == "[dir]/[name]-[hash]"
    assert len(build.callbacks) == 1


def test_setup_without_hash_uses_plain_templates():
    build = FakeBuild(BuildOptions(outdir="dist"))

    manifest_plugin(hash=False).setup(build)

    assert build.initial_options.entry_names == "[dir]/[name]"
    assert build.initial_options.asset_names == "[dir]/[name]"


def test_setup_keeps_user_templates():
    build = FakeBuild(BuildOptions(outdir="dist", entry_names="[dir]/[name].[hash]", asset_names="assets/[name]-[hash]"))

    manifest_plugin().setup(build)

    assert build.initial_options.entry_names == "[dir]/[name].[hash]"
    assert build.initial_options.asset_names == "assets/[name]-[hash]"


def test_keyword_overrides_apply_on_top_of_options():
    plugin = manifest_plugin(ManifestOptions(filename="assets.json"), short_names="input")

    assert plugin.options.filename == "assets.json"
    assert plugin.options.short_names == "input"


def test_unknown_override_is_rejected():
    with pytest.raises(ConfigurationError, match=r"Unknown manifest options: shortNames"):
        manifest_plugin(shortNames=True)


def test_setup_fails_without_output_location():
    with pytest.raises(ConfigurationError, match=r"outdir"):
        manifest_plugin().setup(FakeBuild(BuildOptions()))


def test_setup_rejects_incompatible_options():
    plugin = ManifestPlugin(options=ManifestOptions(use_entrypoint_keys=True, extensionless=True))

    with pytest.raises(IncompatibleOptionsError):
        plugin.setup(FakeBuild(BuildOptions(outdir="dist")))


def test_on_end_writes_manifest(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    build = FakeBuild(BuildOptions(outdir="dist"))
    manifest_plugin().setup(build)

    (run,) = build.finish(
        BuildResult(
            outputs=[
                BuildOutput(
                    path="dist/app-4EALSENI.js",
                    inputs=("src/app.js",),
                    entry_point="src/app.js",
                    contents=b"console.log(1);\n",
                )
            ]
        )
    )

    manifest = json.loads(Path("dist/manifest.json").read_text(encoding="utf-8"))
    assert run.path == "dist/manifest.json"
    assert list(manifest) == ["dist/app.js"]
    assert manifest["dist/app.js"]["file"] == "dist/app-4EALSENI.js"


def test_on_end_skips_failed_builds(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    build = FakeBuild(BuildOptions(outdir="dist"))
    manifest_plugin().setup(build)

    results = build.finish(BuildResult(errors=[BuildMessage("Unexpected end of file")]))

    assert results == [None]
    assert not Path("dist").exists()
