"""Public API for kubecel.

High-level functions over the kernel. Callers should use these instead of
importing from ``kubecel.kernel`` or ``kubecel._internal``.

Typical use:

    compiled = compile_schema(crd_schema)          # once
    errors = validate_compiled(compiled, obj)      # per object
    errors = validate_compiled(compiled, obj, old) # per update

``validate(schema, obj, old)`` gives the same errors without the compile
step, recompiling rules on each call.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from kubecel.contracts import ValidationError, ValidationRule
from kubecel.kernel.environment import CelContext
from kubecel.kernel.rules import CompiledRule
from kubecel.kernel.rules import compile_rule as _compile_rule
from kubecel.kernel.schema import CompiledSchema
from kubecel.kernel.schema import compile_schema as _compile_schema
from kubecel.kernel.schema import compile_schema_validations as _compile_schema_validations
from kubecel.kernel.validator import Validator


def validate(
    schema: Union[Dict[str, Any], CompiledSchema],
    obj: Any,
    old_obj: Optional[Any] = None,
    context: Optional[CelContext] = None,
) -> List[ValidationError]:
    """Validate an object against a schema's x-kubernetes-validations rules.

    Args:
        schema: Raw schema dict (rules compiled on this call) or CompiledSchema
        obj: The object to validate
        old_obj: Previous version of the object; enables transition rules
        context: Evaluation context (default: all extension functions)

    Returns:
        Ordered list of ValidationError; empty if the object is accepted
    """
    return Validator(context).validate(schema, obj, old_obj)


def validate_compiled(
    compiled: CompiledSchema,
    obj: Any,
    old_obj: Optional[Any] = None,
) -> List[ValidationError]:
    """Validate an object using a schema compiled by ``compile_schema``."""
    return Validator().validate_compiled(compiled, obj, old_obj)


def compile_schema(schema: Dict[str, Any], context: Optional[CelContext] = None) -> CompiledSchema:
    """Compile every rule in a schema tree once, for reuse across validations."""
    return _compile_schema(schema, context)


def compile_rule(
    rule: Union[ValidationRule, Mapping[str, Any]],
    context: Optional[CelContext] = None,
) -> CompiledRule:
    """Compile a single rule declaration (never raises on a bad expression)."""
    return _compile_rule(rule, context)


def compile_schema_validations(
    schema: Dict[str, Any],
    context: Optional[CelContext] = None,
) -> List[CompiledRule]:
    """Compile the rules declared directly on one schema node."""
    return _compile_schema_validations(schema, context)


def extract_crd_schema(document: Dict[str, Any], version: Optional[str] = None) -> Dict[str, Any]:
    """Return the openAPIV3Schema of a CRD manifest, or the document itself.

    A document with ``kind: CustomResourceDefinition`` yields the schema of
    the named version (or the first version); any other document is assumed
    to already be a schema.

    Raises:
        ValueError: If the CRD has no matching version or no schema
    """
    if not isinstance(document, dict) or document.get("kind") != "CustomResourceDefinition":
        return document

    versions = (document.get("spec") or {}).get("versions") or []
    for entry in versions:
        if version is None or entry.get("name") == version:
            schema = (entry.get("schema") or {}).get("openAPIV3Schema")
            if not isinstance(schema, dict):
                raise ValueError(f"CRD version '{entry.get('name')}' has no openAPIV3Schema")
            return schema
    if version is None:
        raise ValueError("CRD declares no versions")
    raise ValueError(f"CRD has no version named '{version}'")


def load_json(path: Union[str, os.PathLike, Path]) -> Any:
    """Load a JSON document from a file."""
    with open(Path(path), 'r', encoding='utf-8') as f:
        return json.load(f)
