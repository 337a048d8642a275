"""Response shape normalisation.

Dokploy answers the same logical entity with a keyed wrapper
(``{"application": {...}}``), a bare object, or a bare ``true``. Shape
detection lives here so services only ever see one of three outcomes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Literal

from pydantic import ValidationError

from dokploy_sync.domain.errors import ParseFailure

from .schema import DokployModel


@dataclass(frozen=True, slots=True)
class Resolved[M: DokployModel]:
    entity: M
    status: Literal["resolved"] = "resolved"


@dataclass(frozen=True, slots=True)
class AckOnly:
    """The call succeeded but returned no payload; resolve out of band."""

    status: Literal["ack"] = "ack"


@dataclass(frozen=True, slots=True)
class Unparsed:
    wrapper_keys: tuple[str, ...]
    shape: str
    status: Literal["unparsed"] = "unparsed"

    def error(self, endpoint: str) -> ParseFailure:
        return ParseFailure(endpoint, wrapper_keys=self.wrapper_keys, shape=self.shape)


type Normalized[M: DokployModel] = Resolved[M] | AckOnly | Unparsed


def _decode(raw: bytes) -> object:
    try:
        return json.loads(raw)
    except ValueError:
        return None


def _validate[M: DokployModel](model: type[M], payload: object) -> M | None:
    if not isinstance(payload, dict):
        return None
    try:
        entity = model.model_validate(payload)
    except ValidationError:
        return None
    return entity if entity.primary_id else None


def normalize_response[M: DokployModel](
    raw: bytes,
    model: type[M],
    *wrapper_keys: str,
) -> Normalized[M]:
    """Resolve ``raw`` into ``model``: wrapper, then bare object, then ack."""

    payload = _decode(raw)
    if isinstance(payload, dict):
        for key in wrapper_keys:
            entity = _validate(model, payload.get(key))
            if entity is not None:
                return Resolved(entity)
        entity = _validate(model, payload)
        if entity is not None:
            return Resolved(entity)

    if raw.strip() == b"true":
        return AckOnly()
    return Unparsed(wrapper_keys=wrapper_keys, shape=model.__name__)


def expect_entity[M: DokployModel](
    endpoint: str,
    raw: bytes,
    model: type[M],
    *wrapper_keys: str,
) -> M:
    """Like :func:`normalize_response` but only a resolved entity is acceptable."""

    result = normalize_response(raw, model, *wrapper_keys)
    if isinstance(result, Resolved):
        return result.entity
    raise ParseFailure(endpoint, wrapper_keys=wrapper_keys, shape=model.__name__)


def parse_collection[M: DokployModel](
    endpoint: str,
    raw: bytes,
    model: type[M],
    *wrapper_keys: str,
) -> list[M]:
    """Parse a list response, bare or under one of ``wrapper_keys``."""

    payload = _decode(raw)
    items: object = payload
    if isinstance(payload, dict):
        items = next(
            (payload[key] for key in wrapper_keys if isinstance(payload.get(key), list)),
            None,
        )
    if not isinstance(items, list):
        raise ParseFailure(endpoint, wrapper_keys=wrapper_keys, shape=f"list[{model.__name__}]")
    try:
        return [model.model_validate(item) for item in items if isinstance(item, dict)]
    except ValidationError as exc:
        raise ParseFailure(
            endpoint, wrapper_keys=wrapper_keys, shape=f"list[{model.__name__}]"
        ) from exc
