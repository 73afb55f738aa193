"""Helpers for loading runtime configuration profiles."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import BackendError, ErrorCode
from .models import GlobalSettings, ProfileSettings, RuntimeConfig

DEFAULT_CONFIG_PATH = Path("config/defaults.json")
DEFAULT_PROFILE = "default"
ALLOWED_WHITESPACE = {"ascii", "latin1"}


@dataclass(slots=True)
class ConfigDocument:
    source: Path
    version: int
    global_settings: GlobalSettings
    profiles: Dict[str, ProfileSettings]


def load_runtime_config(
    profile: str = DEFAULT_PROFILE,
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> RuntimeConfig:
    """Load configuration JSON, validate it, and resolve a specific profile.

    Without an explicit ``config_path`` the project file at
    ``config/defaults.json`` is used when present; otherwise the built-in
    defaults apply so the CLI also works outside the repository.
    """

    if config_path is None and not DEFAULT_CONFIG_PATH.exists():
        return _builtin_config(profile, overrides or {})

    document = load_config_document(
        profile_name=profile,
        config_path=config_path,
        overrides=overrides,
    )
    return RuntimeConfig(global_settings=document.global_settings, profile=document.profiles[profile])


def load_config_document(
    *,
    profile_name: Optional[str] = None,
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> ConfigDocument:
    cfg_path = config_path or DEFAULT_CONFIG_PATH
    raw = _read_config_json(cfg_path)

    version = _require_positive_int(raw.get("version"), "version", cfg_path)
    global_section = raw.get("global", {})
    if not isinstance(global_section, Mapping):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"'global' section must be an object in {cfg_path}")

    overrides = overrides or {}
    global_data = {**global_section, **(overrides.get("global") or {})}
    global_settings = _build_global_settings(global_data, cfg_path)

    profiles_section = raw.get("profiles")
    if not isinstance(profiles_section, Mapping) or not profiles_section:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"'profiles' section missing in {cfg_path}")

    profile_overrides = overrides.get("profile") or {}
    profiles: Dict[str, ProfileSettings] = {}
    for name, profile_data in profiles_section.items():
        if not isinstance(profile_data, Mapping):
            raise BackendError(
                ErrorCode.CONFIG_ERROR,
                f"Profile '{name}' must be an object in {cfg_path}",
            )
        merged = dict(profile_data)
        if profile_name and name == profile_name and profile_overrides:
            merged = {**merged, **profile_overrides}
        profiles[name] = _build_profile_settings(name, merged, cfg_path)

    if profile_name and profile_name not in profiles:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Profile '{profile_name}' not found in {cfg_path}",
        )

    return ConfigDocument(
        source=cfg_path,
        version=version,
        global_settings=global_settings,
        profiles=profiles,
    )


# ---------------------------------------------------------------------------
# Internal helpers


def _builtin_config(profile: str, overrides: Dict[str, Dict[str, Any]]) -> RuntimeConfig:
    source = Path("<builtin>")
    if profile != DEFAULT_PROFILE:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Profile '{profile}' not found; no config file at {DEFAULT_CONFIG_PATH}",
        )
    defaults = ProfileSettings()
    profile_data = {
        "description": defaults.description,
        "block_size": defaults.block_size,
        "read_chunk_size": defaults.read_chunk_size,
        "max_workers": defaults.max_workers,
        **(overrides.get("profile") or {}),
    }
    global_data = {"whitespace": GlobalSettings().whitespace, **(overrides.get("global") or {})}
    return RuntimeConfig(
        global_settings=_build_global_settings(global_data, source),
        profile=_build_profile_settings(profile, profile_data, source),
    )


def _read_config_json(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            raw = json.load(handle)
    except FileNotFoundError as exc:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"Config file '{path}' not found") from exc
    except json.JSONDecodeError as exc:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"Config file '{path}' is not valid JSON: {exc}") from exc
    if not isinstance(raw, dict):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"Config file '{path}' must contain a JSON object")
    return raw


def _build_global_settings(data: Mapping[str, Any], source: Path) -> GlobalSettings:
    whitespace = _require_string(
        data.get("whitespace", GlobalSettings().whitespace), "global.whitespace", source
    ).lower()
    if whitespace not in ALLOWED_WHITESPACE:
        allowed = ", ".join(sorted(ALLOWED_WHITESPACE))
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Unsupported whitespace '{whitespace}' in {source}. Allowed: {allowed}",
        )
    return GlobalSettings(whitespace=whitespace)


def _build_profile_settings(name: str, data: Mapping[str, Any], source: Path) -> ProfileSettings:
    prefix = f"profiles.{name}"
    required_fields = ("description", "block_size", "read_chunk_size")
    missing = [field for field in required_fields if field not in data]
    if missing:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Profile '{name}' missing fields {missing} in {source}",
        )

    return ProfileSettings(
        description=_require_string(data.get("description"), f"{prefix}.description", source),
        block_size=_require_positive_int(data.get("block_size"), f"{prefix}.block_size", source),
        read_chunk_size=_require_positive_int(
            data.get("read_chunk_size"), f"{prefix}.read_chunk_size", source
        ),
        max_workers=_optional_positive_int(data.get("max_workers"), f"{prefix}.max_workers", source),
    )


def _require_string(value: Any, field: str, source: Path) -> str:
    if not isinstance(value, str):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be a string in {source}")
    text = value.strip()
    if not text:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be non-empty in {source}")
    return text


def _require_positive_int(value: Any, field: str, source: Path) -> int:
    if isinstance(value, bool):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be an integer in {source}")
    try:
        num = int(value)
    except (TypeError, ValueError) as exc:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"{field} must be an integer in {source}",
        ) from exc
    if num <= 0:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"{field} must be greater than zero in {source}",
        )
    return num


def _optional_positive_int(value: Any, field: str, source: Path) -> Optional[int]:
    if value is None:
        return None
    return _require_positive_int(value, field, source)
