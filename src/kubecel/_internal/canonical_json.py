"""Stable JSON rendering of validation results.

Used by the CLI so ``--json`` output is byte-stable across runs and
platforms: sorted keys, fixed separators, UTF-8 text, and errors kept in the
order the validator produced them.
"""

import json
from typing import Any, Iterable

from kubecel.contracts import ValidationError


def canonical_dumps(obj: Any) -> str:
    """Serialize with sorted keys, stable separators and no ASCII escaping."""
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False
    )


def dump_errors(errors: Iterable[ValidationError]) -> str:
    """Render errors as a JSON list, preserving walk order."""
    return canonical_dumps([e.model_dump() for e in errors])
