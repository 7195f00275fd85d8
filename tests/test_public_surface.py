"""Test public API surface - ensure imports work correctly and no side effects.

This test verifies:
- kubecel.api exposes validate and the compile functions
- Functions work on a tiny schema
- Root exports match __all__
"""

import types


def test_api_exports_core_functions():
    """Test that kubecel.api exports the five public operations."""
    from kubecel.api import (
        compile_rule,
        compile_schema,
        compile_schema_validations,
        validate,
        validate_compiled,
    )

    for func in (validate, validate_compiled, compile_schema, compile_rule, compile_schema_validations):
        assert isinstance(func, types.FunctionType)


def test_api_functions_work_on_tiny_schema():
    from kubecel.api import compile_schema, validate, validate_compiled

    schema = {"type": "object", "x-kubernetes-validations": [{"rule": "has(self.name)"}]}
    assert validate(schema, {"name": "x"}) == []
    assert len(validate_compiled(compile_schema(schema), {})) == 1


def test_root_exports():
    import kubecel

    for name in kubecel.__all__:
        assert hasattr(kubecel, name), f"{name} listed in __all__ but missing"
    assert kubecel.validate is kubecel.api.validate

    # Internal helpers stay internal
    assert "extract_crd_schema" not in kubecel.__all__
    assert "to_value" not in kubecel.__all__


def test_api_imports_no_side_effects():
    """Importing kubecel configures no logging handlers."""
    import logging

    import kubecel  # noqa: F401
    import kubecel.api  # noqa: F401

    assert not logging.getLogger("kubecel").handlers
