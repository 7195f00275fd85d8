"""Schema trees: raw schema views and the compiled, immutable schema.

Both node shapes answer the same questions (type, format, rules, children),
so the validator and the value bridge walk either one with the same code:

- ``RawSchemaNode`` wraps a schema dict and compiles its rules on every
  ``rules`` access (no reuse, nothing to build up front).
- ``CompiledSchema`` is built once by ``compile_schema`` with every rule
  compiled, and never changes afterwards. It is safe to share between
  threads and reuse for any number of validations.

Only ``properties``, ``items`` and schema-valued ``additionalProperties``
become child nodes; a boolean ``additionalProperties`` does not. A declared
property whose schema is not an object has no child node, but its name still
counts as declared, so ``additionalProperties`` never applies to it.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, FrozenSet, Iterator, List, Optional, Tuple, Union

from .environment import CelContext, default_context
from .rules import CompiledRule, compile_rule

logger = logging.getLogger(__name__)

VALIDATIONS_KEY = "x-kubernetes-validations"


def compile_schema_validations(schema: Any, context: Optional[CelContext] = None) -> List[CompiledRule]:
    """Compile the ``x-kubernetes-validations`` of a single schema node.

    Returns an empty list when the key is missing or not a list. Each entry
    compiles independently; a bad entry never prevents the others.
    """
    if not isinstance(schema, Mapping):
        return []
    declared = schema.get(VALIDATIONS_KEY)
    if not isinstance(declared, list):
        return []
    if context is None:
        context = default_context()
    return [compile_rule(entry, context) for entry in declared]


def _str_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


@dataclass(frozen=True)
class CompiledSchema:
    """Immutable schema node with pre-compiled rules."""
    type: Optional[str] = None
    format: Optional[str] = None
    rules: Tuple[CompiledRule, ...] = ()
    properties: Tuple[Tuple[str, "CompiledSchema"], ...] = ()
    items: Optional["CompiledSchema"] = None
    additional_properties: Optional["CompiledSchema"] = None
    # Every declared property name, including those whose schema is not an object
    declared_names: FrozenSet[str] = frozenset()
    _index: Optional[Mapping[str, "CompiledSchema"]] = field(
        init=False, repr=False, compare=False, default=None
    )

    def __post_init__(self):
        object.__setattr__(self, "_index", MappingProxyType(dict(self.properties)))

    def child(self, name: str) -> Optional["CompiledSchema"]:
        return self._index.get(name)

    def has_property(self, name: str) -> bool:
        return name in self._index or name in self.declared_names

    def iter_properties(self) -> Iterator[Tuple[str, "CompiledSchema"]]:
        return iter(self.properties)

    def rule_count(self) -> int:
        """Total number of rules in this subtree."""
        total = len(self.rules)
        for _, child in self.properties:
            total += child.rule_count()
        if self.items is not None:
            total += self.items.rule_count()
        if self.additional_properties is not None:
            total += self.additional_properties.rule_count()
        return total


class RawSchemaNode:
    """Read-only view over a raw schema dict, compiling rules on demand."""

    __slots__ = ("_raw", "_context")

    def __init__(self, raw: Mapping[str, Any], context: Optional[CelContext] = None):
        self._raw = raw
        self._context = context

    @classmethod
    def wrap(cls, schema: Any, context: Optional[CelContext] = None) -> Optional["RawSchemaNode"]:
        if isinstance(schema, RawSchemaNode):
            return schema
        if not isinstance(schema, Mapping):
            return None
        return cls(schema, context)

    @property
    def type(self) -> Optional[str]:
        return _str_or_none(self._raw.get("type"))

    @property
    def format(self) -> Optional[str]:
        return _str_or_none(self._raw.get("format"))

    @property
    def rules(self) -> List[CompiledRule]:
        return compile_schema_validations(self._raw, self._context)

    def _declared(self) -> Mapping[str, Any]:
        declared = self._raw.get("properties")
        return declared if isinstance(declared, Mapping) else {}

    def child(self, name: str) -> Optional["RawSchemaNode"]:
        return RawSchemaNode.wrap(self._declared().get(name), self._context)

    def has_property(self, name: str) -> bool:
        return name in self._declared()

    def iter_properties(self) -> Iterator[Tuple[str, "RawSchemaNode"]]:
        for name, child in self._declared().items():
            node = RawSchemaNode.wrap(child, self._context)
            if node is not None:
                yield name, node

    @property
    def items(self) -> Optional["RawSchemaNode"]:
        return RawSchemaNode.wrap(self._raw.get("items"), self._context)

    @property
    def additional_properties(self) -> Optional["RawSchemaNode"]:
        # A boolean additionalProperties wraps to None.
        return RawSchemaNode.wrap(self._raw.get("additionalProperties"), self._context)


SchemaNode = Union[RawSchemaNode, CompiledSchema]


def compile_schema(schema: Any, context: Optional[CelContext] = None) -> CompiledSchema:
    """Compile a schema tree once for repeated validation.

    Args:
        schema: Raw schema dict (OpenAPI v3 subset with x-kubernetes-validations)
        context: Evaluation context; the shared default context if omitted

    Returns:
        CompiledSchema mirroring the input's structure
    """
    if context is None:
        context = default_context()
    compiled = _compile_node(schema, context)
    logger.debug("compiled schema with %d rules", compiled.rule_count())
    return compiled


def _compile_node(schema: Any, context: CelContext) -> CompiledSchema:
    if not isinstance(schema, Mapping):
        return CompiledSchema()

    properties = []
    declared = schema.get("properties")
    if isinstance(declared, Mapping):
        for name, child in declared.items():
            if isinstance(child, Mapping):
                properties.append((name, _compile_node(child, context)))

    items = schema.get("items")
    additional = schema.get("additionalProperties")
    return CompiledSchema(
        type=_str_or_none(schema.get("type")),
        format=_str_or_none(schema.get("format")),
        rules=tuple(compile_schema_validations(schema, context)),
        properties=tuple(properties),
        items=_compile_node(items, context) if isinstance(items, Mapping) else None,
        additional_properties=(
            _compile_node(additional, context) if isinstance(additional, Mapping) else None
        ),
        declared_names=frozenset(declared) if isinstance(declared, Mapping) else frozenset(),
    )
