from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Mapping, Sequence
from typing import Any

from asset_manifest.errors import ManifestError

SIDE_CHOICES = ("true", "false", "input", "output")


def setup_logger(verbose: bool = False) -> logging.Logger:
    logger = logging.getLogger("asset_manifest")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger


def _side(value: str | None) -> bool | str | None:
    if value is None:
        return None
    if value in ("true", "false"):
        return value == "true"
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="asset-manifest", add_help=True)
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Write a manifest from a bundler metafile")
    build.add_argument("--metafile", required=True, help="Path to the bundler metafile JSON")
    target = build.add_mutually_exclusive_group()
    target.add_argument("--outdir", help="Build output directory")
    target.add_argument("--outfile", help="Single build output file")
    build.add_argument("--entry-names", help="Naming template used for entry outputs")
    build.add_argument("--asset-names", help="Naming template used for asset outputs")
    build.add_argument("--config", help="Path to an asset-manifest.yaml config file")
    build.add_argument("--filename", help="Manifest filename (default: manifest.json)")
    build.add_argument("--no-hash", action="store_true", help="Outputs are not hashed")
    build.add_argument("--short-names", choices=SIDE_CHOICES)
    build.add_argument("--extensionless", choices=SIDE_CHOICES)
    build.add_argument("--relative", choices=SIDE_CHOICES)
    build.add_argument("--use-entrypoint-keys", action="store_true")
    build.add_argument("--append", action="store_true", help="Merge into an existing manifest")
    build.add_argument("--verbose", action="store_true", help="Log every resolved output")

    strip = sub.add_parser("strip-hash", help="Show where a template puts the hash in a filename")
    strip.add_argument("template")
    strip.add_argument("filename")

    return parser


def _options_from_args(args: argparse.Namespace, config: Mapping[str, Any]) -> dict[str, Any]:
    options: dict[str, Any] = dict(config)
    if args.filename:
        options["filename"] = args.filename
    if args.no_hash:
        options["hash"] = False
    for name in ("short_names", "extensionless", "relative"):
        value = _side(getattr(args, name))
        if value is not None:
            options[name] = value
    if args.use_entrypoint_keys:
        options["use_entrypoint_keys"] = True
    if args.append:
        options["append"] = True
    return options


def _run_build(args: argparse.Namespace) -> int:
    from asset_manifest.app.builder import ManifestBuilder
    from asset_manifest.foundation.config_io import load_config
    from asset_manifest.framework.build import BuildOptions, BuildResult, load_metafile
    from asset_manifest.framework.config import ManifestOptions

    logger = setup_logger(args.verbose)
    cfg, meta = load_config(args.config)
    logger.debug("Config mode=%s paths=%s", meta["mode"], meta["paths"])

    manifest_cfg = cfg.get("manifest") or {}
    if not isinstance(manifest_cfg, Mapping):
        raise ManifestError("Config key 'manifest' must be a mapping")
    options = ManifestOptions.from_dict(_options_from_args(args, manifest_cfg))

    outputs = load_metafile(args.metafile)
    build_options = BuildOptions(
        outdir=args.outdir,
        outfile=args.outfile,
        entry_names=args.entry_names,
        asset_names=args.asset_names,
        metafile=True,
    )
    builder = ManifestBuilder(options, build_options, logger=logger)
    run = builder.run(BuildResult(outputs=outputs))
    if run is not None:
        print(run.path)
    return 0


def _run_strip_hash(args: argparse.Namespace) -> int:
    from asset_manifest.framework.templates import NameTemplateMatcher

    matcher = NameTemplateMatcher(args.template)
    span = matcher.locate(args.filename)
    print(matcher.strip(args.filename))
    if span is None:
        print("hash: <none>")
    else:
        print(f"hash: {span.extract(args.filename)} [{span.start}:{span.end}]")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)

    try:
        if args.command == "build":
            return _run_build(args)
        if args.command == "strip-hash":
            return _run_strip_hash(args)
    except (ManifestError, OSError) as exc:
        print(f"asset-manifest: {exc}", file=sys.stderr)
        return 1

    raise AssertionError(f"Unhandled command: {args.command}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
