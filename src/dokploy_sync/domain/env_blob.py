"""The ``KEY=VALUE`` environment blob stored on applications, composes and projects."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping

from .errors import DokployError


class EnvBlob(MutableMapping[str, str]):
    """Ordered key/value view of an environment blob.

    Parsing ignores blank lines, ``#`` comments and lines without ``=``; the
    value is everything after the first ``=``. Serialisation writes one
    ``KEY=VALUE`` per line in insertion order, so comments are not preserved.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Mapping[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(items) if items else {}

    @classmethod
    def parse(cls, text: str | None) -> EnvBlob:
        blob = cls()
        if not text:
            return blob
        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue
            key, sep, value = line.partition("=")
            if not sep:
                continue
            blob._items[key] = value
        return blob

    def serialize(self) -> str:
        return "\n".join(f"{key}={value}" for key, value in self._items.items())

    def copy(self) -> EnvBlob:
        return EnvBlob(self._items)

    def replace_all(self, values: Mapping[str, str]) -> None:
        self._items.clear()
        self._items.update(values)

    def __getitem__(self, key: str) -> str:
        return self._items[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._items[key] = value

    def __delitem__(self, key: str) -> None:
        del self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, EnvBlob):
            return self._items == other._items
        if isinstance(other, Mapping):
            return self._items == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"EnvBlob({self._items!r})"


def variable_id(owner_id: str, key: str) -> str:
    return f"{owner_id}_{key}"


def split_variable_id(value: str, *, owner_id: str | None = None) -> tuple[str, str]:
    """Split ``<ownerId>_<key>`` back into its parts.

    Owner ids may contain underscores themselves; pass ``owner_id`` when it is
    known so the split does not guess.
    """

    if owner_id:
        prefix = f"{owner_id}_"
        if value.startswith(prefix) and len(value) > len(prefix):
            return owner_id, value[len(prefix) :]
        raise DokployError(f"variable id {value!r} does not belong to owner {owner_id}")
    owner, sep, key = value.partition("_")
    if not sep or not owner or not key:
        raise DokployError(f"invalid variable id format: {value!r}")
    return owner, key
