"""Compose volume naming.

Dokploy prefixes compose volumes with the stack's app name on the wire
(``<appName>_<volume>``); users configure the bare volume name.
"""

from __future__ import annotations


def to_wire_volume_name(app_name: str | None, volume_name: str) -> str:
    app_name = (app_name or "").strip()
    volume_name = volume_name.strip()
    if not app_name or not volume_name:
        return volume_name
    prefix = f"{app_name}_"
    if volume_name.startswith(prefix):
        return volume_name
    return prefix + volume_name


def from_wire_volume_name(app_name: str | None, volume_name: str) -> str:
    app_name = (app_name or "").strip()
    volume_name = volume_name.strip()
    if not app_name or not volume_name:
        return volume_name
    return volume_name.removeprefix(f"{app_name}_")
