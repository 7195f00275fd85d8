"""Schema tree walking and CEL rule evaluation.

The validator walks a schema (raw dict or CompiledSchema) in lockstep with
the new object and, for updates, the old object:

1. At each node, every rule runs in declared order; the node's own errors
   are recorded before any child is visited.
2. Children: declared ``properties`` present in the object, then keys
   covered only by ``additionalProperties`` (object key order), then list
   elements under ``items`` (only the elements the object has).
3. Old values are aligned by property name and by list index. An old value
   that is JSON null is present; only a missing key or index is absent.

Rule outcomes:
- true: no error
- false, runtime failure, or a non-boolean result: one error with the
  resolved message (messageExpression, then message, then a default)
- static-only (failed to compile): always its static error
- transition rule (references ``oldSelf``) with no old value: skipped,
  unless ``optionalOldSelf`` is set, in which case ``oldSelf`` is null

Nothing in the walk raises on bad rules or bad data; every problem becomes a
ValidationError at the path where it happened.
"""

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence

from celpy import celtypes

from kubecel._internal.field_path import join_field, join_index, join_relative
from kubecel.contracts import ValidationError
from kubecel.exceptions import EvaluationError
from .environment import CelContext
from .rules import CompiledRule, OLD_SELF
from .schema import CompiledSchema, RawSchemaNode, SchemaNode
from .values import convert_for_node

logger = logging.getLogger(__name__)

SELF = "self"

# Old value absent at a node, as opposed to an old value that is JSON null.
_MISSING = object()


class Validator:
    """Validates objects against the x-kubernetes-validations of a schema.

    For repeated validation against the same schema, compile it once with
    ``compile_schema`` and call ``validate_compiled``; ``validate`` on a raw
    schema recompiles every rule on every call.

    A Validator holds no per-call state, so one instance (and one
    CompiledSchema) can serve concurrent calls from several threads.
    """

    def __init__(self, context: Optional[CelContext] = None):
        self._context = context

    def validate(
        self,
        schema: Any,
        obj: Any,
        old_obj: Optional[Any] = None,
    ) -> List[ValidationError]:
        """Validate an object (and optional old object) against a schema.

        Args:
            schema: Raw schema dict, or a CompiledSchema
            obj: The new object (decoded JSON)
            old_obj: The previous version, for transition rules

        Returns:
            Errors in walk order; empty means the object is accepted
        """
        if isinstance(schema, CompiledSchema):
            return self.validate_compiled(schema, obj, old_obj)
        errors: List[ValidationError] = []
        root = RawSchemaNode.wrap(schema, self._context)
        if root is not None:
            self._walk(root, obj, _old_root(old_obj), "", errors)
        return errors

    def validate_compiled(
        self,
        compiled: CompiledSchema,
        obj: Any,
        old_obj: Optional[Any] = None,
    ) -> List[ValidationError]:
        """Validate using a pre-compiled schema tree; rules are not recompiled."""
        errors: List[ValidationError] = []
        self._walk(compiled, obj, _old_root(old_obj), "", errors)
        return errors

    # -- walking -----------------------------------------------------------

    def _walk(
        self,
        node: SchemaNode,
        value: Any,
        old_value: Any,
        path: str,
        errors: List[ValidationError],
    ) -> None:
        rules = node.rules
        if rules:
            self._evaluate_rules(rules, node, value, old_value, path, errors)

        if isinstance(value, Mapping):
            for name, child in node.iter_properties():
                if name in value:
                    self._walk(child, value[name], _old_field(old_value, name), join_field(path, name), errors)

            additional = node.additional_properties
            if additional is not None:
                for key, item in value.items():
                    if node.has_property(key):
                        continue
                    self._walk(additional, item, _old_field(old_value, key), join_field(path, str(key)), errors)

        elif isinstance(value, (list, tuple)):
            items = node.items
            if items is not None:
                for i, item in enumerate(value):
                    self._walk(items, item, _old_item(old_value, i), join_index(path, i), errors)

    # -- evaluation --------------------------------------------------------

    def _evaluate_rules(
        self,
        rules: Sequence[CompiledRule],
        node: SchemaNode,
        value: Any,
        old_value: Any,
        path: str,
        errors: List[ValidationError],
    ) -> None:
        activation: Optional[Dict[str, Any]] = None
        bind_error: Optional[EvaluationError] = None
        try:
            activation = {
                SELF: convert_for_node(value, node),
                OLD_SELF: None if old_value is _MISSING else convert_for_node(old_value, node),
            }
        except TypeError as e:
            bind_error = EvaluationError(SELF, str(e))

        for compiled in rules:
            if compiled.is_static_only:
                errors.append(_make_error(compiled, compiled.default_message(), path))
                continue
            if compiled.is_transition_rule and old_value is _MISSING and not compiled.optional_old_self:
                continue

            if bind_error is not None:
                logger.debug("rule skipped evaluation at %r: %s", path, bind_error)
                errors.append(_make_error(compiled, compiled.default_message(), path))
                continue

            try:
                result = compiled.expression.evaluate(activation)
                if not isinstance(result, (bool, celtypes.BoolType)):
                    raise EvaluationError(
                        compiled.rule.rule,
                        f"did not evaluate to bool (got {type(result).__name__})",
                    )
            except EvaluationError as e:
                logger.debug("rule failed at %r: %s", path, e)
                errors.append(_make_error(compiled, _resolve_message(compiled, activation), path))
                continue

            if not result:
                errors.append(_make_error(compiled, _resolve_message(compiled, activation), path))


def _resolve_message(compiled: CompiledRule, activation: Optional[Dict[str, Any]]) -> str:
    """messageExpression result if it yields a string, else the static fallbacks."""
    if compiled.message_expression is not None and activation is not None:
        try:
            message = compiled.message_expression.evaluate(activation)
        except EvaluationError as e:
            logger.debug("messageExpression fell back to static message: %s", e)
        else:
            if isinstance(message, str):
                return str(message)
    return compiled.default_message()


def _make_error(compiled: CompiledRule, message: str, path: str) -> ValidationError:
    if compiled.rule.field_path:
        path = join_relative(path, compiled.rule.field_path)
    return ValidationError(
        field_path=path,
        message=message,
        reason=compiled.rule.reason,
        rule=compiled.rule.rule,
    )


def _old_root(old_obj: Optional[Any]) -> Any:
    # At the root, None means no old object was given.
    return _MISSING if old_obj is None else old_obj


def _old_field(old_value: Any, key: Any) -> Any:
    if isinstance(old_value, Mapping) and key in old_value:
        return old_value[key]
    return _MISSING


def _old_item(old_value: Any, index: int) -> Any:
    if isinstance(old_value, (list, tuple)) and index < len(old_value):
        return old_value[index]
    return _MISSING
