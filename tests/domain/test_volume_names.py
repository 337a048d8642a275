from __future__ import annotations

import pytest

from dokploy_sync.domain.volumes import from_wire_volume_name, to_wire_volume_name


def test_wire_name_gets_app_prefix() -> None:
    assert to_wire_volume_name("ghost-1", "data") == "ghost-1_data"


def test_already_prefixed_name_is_not_prefixed_twice() -> None:
    assert to_wire_volume_name("ghost-1", "ghost-1_data") == "ghost-1_data"


def test_logical_name_strips_prefix() -> None:
    assert from_wire_volume_name("ghost-1", "ghost-1_data") == "data"
    assert from_wire_volume_name("ghost-1", "other_data") == "other_data"


@pytest.mark.parametrize("app_name", [None, "", "  "])
def test_without_app_name_names_pass_through(app_name: str | None) -> None:
    assert to_wire_volume_name(app_name, " data ") == "data"
    assert from_wire_volume_name(app_name, "ghost-1_data") == "ghost-1_data"
