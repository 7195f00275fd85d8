"""Performance sentinels (gated)."""

from __future__ import annotations

import pytest

from kubecel.api import compile_schema, validate, validate_compiled

MAX_COMPILED_WIDE_MS = 250.0
MAX_RAW_WIDE_MS = 2500.0

FIELD_COUNT = 50
ITEM_COUNT = 20


def _wide_schema():
    properties = {
        f"field{i}": {
            "type": "integer",
            "x-kubernetes-validations": [{"rule": f"self >= {i}", "message": f"field{i} too small"}],
        }
        for i in range(FIELD_COUNT)
    }
    properties["items"] = {
        "type": "array",
        "items": {
            "type": "object",
            "properties": {"timeout": {"type": "string", "format": "duration"}},
            "x-kubernetes-validations": [{"rule": "self.timeout <= duration('1h')"}],
        },
    }
    return {"type": "object", "properties": properties}


def _wide_object():
    obj = {f"field{i}": i - 1 for i in range(FIELD_COUNT)}
    obj["items"] = [{"timeout": "30m"} for _ in range(ITEM_COUNT)]
    return obj


def _assert_budget(benchmark, max_ms: float) -> None:
    mean_ms = benchmark.stats.stats.mean * 1000.0
    assert mean_ms < max_ms, f"Mean {mean_ms:.2f} ms exceeded budget {max_ms:.2f} ms"


@pytest.mark.perf
def test_compiled_wide_schema_sentinel(benchmark):
    compiled = compile_schema(_wide_schema())
    obj = _wide_object()
    errors = benchmark.pedantic(lambda: validate_compiled(compiled, obj), rounds=3, iterations=1)

    assert len(errors) == FIELD_COUNT
    _assert_budget(benchmark, MAX_COMPILED_WIDE_MS)


@pytest.mark.perf
def test_raw_wide_schema_sentinel(benchmark):
    schema = _wide_schema()
    obj = _wide_object()
    errors = benchmark.pedantic(lambda: validate(schema, obj), rounds=3, iterations=1)

    assert len(errors) == FIELD_COUNT
    _assert_budget(benchmark, MAX_RAW_WIDE_MS)
