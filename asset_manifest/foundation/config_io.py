from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from asset_manifest.errors import ConfigurationError

CONFIG_FILENAME = "asset-manifest.yaml"
LOCAL_OVERLAY_FILENAME = "asset-manifest.local.yaml"
DEFAULT_ENV_VAR = "ASSET_MANIFEST_CONFIG"


def find_repo_root(start: str | os.PathLike[str] | None = None) -> str:
    start_path = Path(start or os.getcwd()).resolve()
    if start_path.is_file():
        start_path = start_path.parent

    markers = ("pyproject.toml", ".git")
    for candidate in (start_path, *start_path.parents):
        if (candidate / "pyproject.toml").is_file():
            return str(candidate)
        if (candidate / ".git").exists():
            return str(candidate)

    raise FileNotFoundError(
        "Cannot locate repo root: searched from "
        f"{start_path} for {', '.join(markers)}"
    )


def _load_yaml_mapping(path: str) -> dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc

    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise ConfigurationError(f"Config file must contain a YAML mapping: {path}")
    return dict(payload)


def _deep_merge(base: Any, overlay: Any, *, path: str) -> Any:
    if overlay is None:
        return None

    if base is None:
        return overlay

    if isinstance(base, Mapping):
        if not isinstance(overlay, Mapping):
            raise ConfigurationError(
                f"Invalid config overlay merge at {path}: base is mapping but overlay is {type(overlay).__name__}"
            )
        merged: dict[str, Any] = dict(base)
        for key, overlay_value in overlay.items():
            next_path = f"{path}.{key}" if path else str(key)
            if key in base:
                merged[key] = _deep_merge(base[key], overlay_value, path=next_path)
            else:
                merged[key] = overlay_value
        return merged

    if isinstance(overlay, Mapping):
        raise ConfigurationError(
            f"Invalid config overlay merge at {path}: base is {type(base).__name__} but overlay is mapping"
        )

    return overlay


def load_config(
    config_path: str | os.PathLike[str] | None = None,
    *,
    env_var: str | None = DEFAULT_ENV_VAR,
    start_dir: str | os.PathLike[str] | None = None,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Load the manifest configuration file.

    An explicit path (or the environment variable) loads a single file. Otherwise
    `asset-manifest.yaml` is looked up at the repository root and an optional
    `asset-manifest.local.yaml` next to it is merged on top. A missing base file
    yields an empty config.
    """

    explicit_path = None
    if config_path is not None:
        explicit_path = str(config_path).strip() or None
    elif env_var:
        raw_env = os.environ.get(str(env_var), "")
        explicit_path = raw_env.strip() or None

    if explicit_path:
        expanded = os.path.abspath(os.path.expandvars(os.path.expanduser(explicit_path)))
        if not os.path.exists(expanded):
            raise ConfigurationError(f"Missing config file: {expanded}")
        cfg = _load_yaml_mapping(expanded)
        meta = {
            "mode": "env" if config_path is None else "explicit",
            "paths": [expanded],
            "env_var": env_var,
            "repo_root": None,
        }
        return cfg, meta

    try:
        repo_root: str | None = find_repo_root(start_dir)
    except FileNotFoundError:
        repo_root = None

    directory = repo_root or os.path.abspath(str(start_dir or os.getcwd()))
    base_config_path = os.path.join(directory, CONFIG_FILENAME)
    local_overlay_path = os.path.join(directory, LOCAL_OVERLAY_FILENAME)

    cfg: dict[str, Any] = {}
    loaded_paths: list[str] = []
    mode = "default"

    if os.path.exists(base_config_path):
        cfg = _load_yaml_mapping(base_config_path)
        loaded_paths.append(os.path.abspath(base_config_path))
        mode = "base"

        if os.path.exists(local_overlay_path):
            overlay = _load_yaml_mapping(local_overlay_path)
            cfg = _deep_merge(cfg, overlay, path="")
            loaded_paths.append(os.path.abspath(local_overlay_path))
            mode = "base+local"

    meta = {"mode": mode, "paths": loaded_paths, "env_var": env_var, "repo_root": repo_root}
    return cfg, meta
