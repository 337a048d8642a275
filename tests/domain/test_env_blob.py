from __future__ import annotations

import pytest

from dokploy_sync.domain.env_blob import EnvBlob, split_variable_id, variable_id
from dokploy_sync.domain.errors import DokployError


def test_parse_skips_comments_blank_lines_and_lines_without_separator() -> None:
    blob = EnvBlob.parse("# header\n\nFOO=1\nnot a pair\n  BAR = two \nURL=a=b=c\n")

    assert dict(blob) == {"FOO": "1", "BAR ": " two", "URL": "a=b=c"}


def test_parse_none_and_empty_give_empty_blob() -> None:
    assert len(EnvBlob.parse(None)) == 0
    assert len(EnvBlob.parse("")) == 0


def test_serialize_keeps_insertion_order() -> None:
    blob = EnvBlob.parse("B=2\nA=1")
    blob["C"] = "3"

    assert blob.serialize() == "B=2\nA=1\nC=3"


def test_equality_ignores_key_order() -> None:
    assert EnvBlob.parse("A=1\nB=2") == EnvBlob.parse("B=2\nA=1")
    assert EnvBlob.parse("A=1") == {"A": "1"}
    assert EnvBlob.parse("A=1") != EnvBlob.parse("A=2")


def test_copy_is_independent() -> None:
    original = EnvBlob.parse("A=1")
    clone = original.copy()
    clone["B"] = "2"

    assert "B" not in original


def test_replace_all_drops_previous_keys() -> None:
    blob = EnvBlob.parse("A=1\nB=2")
    blob.replace_all({"C": "3"})

    assert dict(blob) == {"C": "3"}


def test_variable_id_round_trip() -> None:
    assert variable_id("app1", "FOO") == "app1_FOO"
    assert split_variable_id("app1_FOO") == ("app1", "FOO")
    assert split_variable_id("app1_MY_KEY") == ("app1", "MY_KEY")


def test_split_variable_id_with_known_owner_containing_underscore() -> None:
    assert split_variable_id("my_app_FOO", owner_id="my_app") == ("my_app", "FOO")


@pytest.mark.parametrize("value", ["nounderscore", "_FOO", "app_"])
def test_split_variable_id_rejects_malformed(value: str) -> None:
    with pytest.raises(DokployError, match="invalid variable id"):
        split_variable_id(value)


def test_split_variable_id_rejects_foreign_owner() -> None:
    with pytest.raises(DokployError, match="does not belong"):
        split_variable_id("other_FOO", owner_id="app1")
