from __future__ import annotations

from pydantic import BaseModel

from stagegen.canonical import digest, encode, model_hash, term_hash
from stagegen.lib.gen import struct
from stagegen.term import v


class _Doc(BaseModel):
    name: str
    tags: dict[str, int]


def test_encode_sorts_keys() -> None:
    payload = {"b": 1, "a": 2}
    assert encode(payload) == b'{"a":2,"b":1}'


def test_digest_ignores_key_order() -> None:
    assert digest({"x": 1, "y": [1, 2]}) == digest({"y": [1, 2], "x": 1})


def test_model_hash_matches_dumped_document() -> None:
    doc = _Doc(name="a", tags={"z": 1, "y": 2})
    assert model_hash(doc) == digest({"name": "a", "tags": {"y": 2, "z": 1}})


def test_term_hash_tracks_structure() -> None:
    first = struct(v("Point"), v("int x;"))
    same = struct(v("Point"), v("int x;"))
    other = struct(v("Point"), v("int y;"))
    assert term_hash(first) == term_hash(same)
    assert term_hash(first) != term_hash(other)
