from __future__ import annotations

import hashlib
import json
from typing import Any

from pydantic import BaseModel

from stagegen.term import Term


def encode(data: Any) -> bytes:
    """Key-sorted, whitespace-free JSON so equal documents encode equal."""
    text = json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return text.encode("utf-8")


def digest(data: Any) -> str:
    return hashlib.sha256(encode(data)).hexdigest()


def model_hash(model: BaseModel) -> str:
    return digest(model.model_dump(mode="json", by_alias=True))


def term_hash(term: Term) -> str:
    """Structural hash; equal terms hash equal across runs."""
    return digest(term.to_dict())
