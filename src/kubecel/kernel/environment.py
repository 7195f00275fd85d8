"""CEL evaluation contexts built from explicit function groups.

A ``CelContext`` pairs a ``celpy.Environment`` with a read-only table of
extension functions. Contexts are built by composing named groups; nothing is
registered globally, so differently configured contexts can coexist in one
process and be shared between threads.
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Callable, FrozenSet, Iterable, Mapping, Optional, Tuple

import celpy
from celpy.celparser import CELParseError
from celpy.evaluation import CELEvalError
from lark import Token, Tree

from kubecel.exceptions import CompileError, EvaluationError

logger = logging.getLogger(__name__)

# Grammar rules whose IDENT token is a variable reference (as opposed to a
# field selection or a function name).
_VARIABLE_RULES = frozenset({"ident", "dot_ident"})


@dataclass(frozen=True)
class FunctionGroup:
    """A named set of CEL extension functions."""
    name: str
    functions: Mapping[str, Callable[..., Any]]


@dataclass(frozen=True)
class CompiledExpression:
    """An executable CEL expression and the variables it references."""
    text: str
    ast: Any = field(repr=False)
    runner: Any = field(repr=False, compare=False)
    references: FrozenSet[str] = frozenset()

    def has_variable(self, name: str) -> bool:
        return name in self.references

    def evaluate(self, activation: Mapping[str, Any]) -> Any:
        """Evaluate against variable bindings.

        Raises:
            EvaluationError: On any runtime failure of the evaluator
        """
        try:
            result = self.runner.evaluate(dict(activation))
        except CELEvalError as e:
            raise EvaluationError(self.text, str(e)) from e
        except Exception as e:
            # The evaluator surfaces some failures as plain Python errors.
            raise EvaluationError(self.text, f"{type(e).__name__}: {e}") from e
        if isinstance(result, CELEvalError):
            raise EvaluationError(self.text, str(result))
        return result


class CelContext:
    """An immutable CEL environment plus extension functions."""

    def __init__(self, groups: Iterable[FunctionGroup] = ()):
        self._groups: Tuple[FunctionGroup, ...] = tuple(groups)
        merged = {}
        # Later groups win, so dispatch groups go last.
        for group in self._groups:
            merged.update(group.functions)
        self._functions = MappingProxyType(merged)
        self._env = celpy.Environment()

    @property
    def group_names(self) -> Tuple[str, ...]:
        return tuple(g.name for g in self._groups)

    @property
    def functions(self) -> Mapping[str, Callable[..., Any]]:
        return self._functions

    def compile(self, text: str) -> CompiledExpression:
        """Parse an expression and bind it to this context's functions.

        Raises:
            CompileError: If the expression does not parse
        """
        try:
            ast = self._env.compile(text)
        except CELParseError as e:
            raise CompileError(text, str(e)) from e
        runner = self._env.program(ast, functions=dict(self._functions))
        return CompiledExpression(
            text=text,
            ast=ast,
            runner=runner,
            references=collect_variable_references(ast),
        )


def collect_variable_references(ast: Any) -> FrozenSet[str]:
    """Collect free variable names from a parsed expression tree.

    Walks the syntax tree instead of searching the source text, so
    ``'oldSelf'`` inside a string literal or ``self.oldSelf`` as a field
    selection is not mistaken for a reference to the ``oldSelf`` variable.
    """
    if not isinstance(ast, Tree):
        return frozenset()
    names = set()
    for subtree in ast.iter_subtrees():
        if subtree.data not in _VARIABLE_RULES:
            continue
        for child in subtree.children:
            if isinstance(child, Token) and child.type == "IDENT":
                names.add(str(child))
    return frozenset(names)


def build_context(groups: Optional[Iterable[FunctionGroup]] = None) -> CelContext:
    """Build a fresh context from function groups (all groups by default)."""
    if groups is None:
        from .extensions import ALL_GROUPS
        groups = ALL_GROUPS
    context = CelContext(groups)
    logger.debug("built CEL context with groups %s", context.group_names)
    return context


@lru_cache(maxsize=None)
def default_context() -> CelContext:
    """Context with every extension group, built once and shared read-only."""
    return build_context()
