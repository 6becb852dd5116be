from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from blepanel.config import Settings, get_settings, resolve_config_path
from blepanel.models import Notice, NoticeLevel
from blepanel.stack import BleakStack, BleStack, MockBleStack

NOTICE_STYLES = {
    NoticeLevel.SUCCESS: "green",
    NoticeLevel.WARNING: "yellow",
    NoticeLevel.ERROR: "red",
}


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def with_scan_duration(settings: Settings, duration: float | None) -> Settings:
    if duration is None:
        return settings
    if duration <= 0:
        typer.echo("Scan duration must be positive", err=True)
        raise typer.Exit(1)
    scanning = settings.scanning.model_copy(update={"duration": duration})
    return settings.model_copy(update={"scanning": scanning})


def build_stack(mock: bool = False) -> BleStack:
    if mock:
        return MockBleStack()
    return BleakStack()


def print_notices(console: Console, notices: list[Notice]) -> None:
    for notice in notices:
        style = NOTICE_STYLES[notice.level]
        console.print(f"[{style}]{notice.title}:[/{style}] {notice.message}")
