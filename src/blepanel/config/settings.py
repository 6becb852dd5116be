from __future__ import annotations

import json
import os
import tomllib
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from blepanel.models import Capability

from .paths import default_config_path, expand_path

CONFIG_ENV_VAR = "BLEPANEL_CONFIG"


class ScanningConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    duration: float = Field(default=10.0, gt=0)
    service_uuids: list[str] = Field(default_factory=list)
    allow_duplicates: bool = True
    auto_start: bool = True


class ConnectionConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    timeout: float = Field(default=10.0, gt=0)
    retrieve_services: bool = True


class PermissionsConfig(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    required: list[Capability] = Field(default_factory=lambda: list(Capability))


class Settings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    scanning: ScanningConfig = Field(default_factory=ScanningConfig)
    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)
    permissions: PermissionsConfig = Field(default_factory=PermissionsConfig)


def resolve_config_path(allow_missing: bool = False) -> tuple[Path, bool]:
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = expand_path(env_path)
        if not allow_missing and not path.exists():
            raise FileNotFoundError(f"{CONFIG_ENV_VAR} points to missing file: {path}")
        return path, path.exists()

    path = default_config_path()
    return path, path.exists()


def load_settings(path: Path) -> Settings:
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in config file: {path}\n{exc}") from exc

    try:
        return Settings.model_validate(data or {})
    except ValidationError as exc:
        raise ValueError(f"Invalid config file: {path}\n{exc}") from exc


@lru_cache
def get_settings() -> Settings:
    path, exists = resolve_config_path(allow_missing=False)
    if exists:
        return load_settings(path)
    return Settings()


def _toml_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return "[" + ", ".join(_toml_value(item) for item in value) + "]"
    if isinstance(value, Capability):
        return json.dumps(value.value)
    if isinstance(value, str):
        return json.dumps(value)
    return str(value)


def render_settings_toml(settings: Settings) -> str:
    scanning = settings.scanning
    connection = settings.connection
    lines = [
        "# blepanel configuration",
        "",
        "[scanning]",
        f"duration = {_toml_value(scanning.duration)}",
        f"service_uuids = {_toml_value(scanning.service_uuids)}",
        f"allow_duplicates = {_toml_value(scanning.allow_duplicates)}",
        f"auto_start = {_toml_value(scanning.auto_start)}",
        "",
        "[connection]",
        f"timeout = {_toml_value(connection.timeout)}",
        f"retrieve_services = {_toml_value(connection.retrieve_services)}",
        "",
        "[permissions]",
        f"required = {_toml_value(settings.permissions.required)}",
        "",
    ]
    return "\n".join(lines)


def write_settings(settings: Settings, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_settings_toml(settings))
