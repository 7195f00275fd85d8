"""Compilation of ``x-kubernetes-validations`` entries into executable rules.

Compilation is best-effort and never raises:
- If the rule expression does not parse, the result is static-only: it keeps
  the declaration and the parse error, and always fails with its static
  message when the validator reaches it.
- If only ``messageExpression`` does not parse, it is dropped and message
  resolution falls back to ``message``, then to ``"failed rule: <rule>"``.
- If the entry is not a rule declaration at all, it becomes a static-only
  rule reporting the invalid definition.
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from kubecel.contracts import ValidationRule
from kubecel.exceptions import CompileError
from .environment import CelContext, CompiledExpression, default_context

logger = logging.getLogger(__name__)

OLD_SELF = "oldSelf"


@dataclass(frozen=True)
class CompiledRule:
    """A rule declaration with its compiled forms."""
    rule: ValidationRule
    expression: Optional[CompiledExpression]  # None: static-only (compile failed)
    message_expression: Optional[CompiledExpression] = None
    is_transition_rule: bool = False
    compile_error: Optional[str] = None

    @property
    def is_static_only(self) -> bool:
        return self.expression is None

    @property
    def optional_old_self(self) -> bool:
        return self.rule.optional_old_self is True

    def default_message(self) -> str:
        """Message used when neither messageExpression nor evaluation helps."""
        if self.rule.message:
            return self.rule.message
        if self.compile_error is not None:
            return self.compile_error
        return f"failed rule: {self.rule.rule}"


def compile_rule(
    rule_decl: Union[ValidationRule, Mapping[str, Any]],
    context: Optional[CelContext] = None,
) -> CompiledRule:
    """Compile one rule declaration.

    Args:
        rule_decl: A ValidationRule or its raw (camelCase) mapping
        context: Evaluation context; the shared default context if omitted

    Returns:
        CompiledRule (static-only when the declaration or expression is bad)
    """
    if context is None:
        context = default_context()

    if isinstance(rule_decl, ValidationRule):
        rule = rule_decl
    else:
        try:
            rule = ValidationRule.model_validate(rule_decl)
        except PydanticValidationError as e:
            detail = f"invalid rule definition: {_first_error(e)}"
            logger.warning("%s", detail)
            return CompiledRule(
                rule=_fallback_rule(rule_decl),
                expression=None,
                compile_error=detail,
            )

    try:
        expression = context.compile(rule.rule)
    except CompileError as e:
        logger.warning("%s", e)
        return CompiledRule(rule=rule, expression=None, compile_error=str(e))

    message_expression = None
    if rule.message_expression is not None:
        try:
            message_expression = context.compile(rule.message_expression)
        except CompileError as e:
            logger.warning("messageExpression ignored: %s", e)

    return CompiledRule(
        rule=rule,
        expression=expression,
        message_expression=message_expression,
        is_transition_rule=expression.has_variable(OLD_SELF),
    )


_STATIC_KEYS = (("message", "message"), ("reason", "reason"), ("fieldPath", "field_path"))


def _fallback_rule(rule_decl: Any) -> ValidationRule:
    """Keep whatever string fields of a bad declaration are still usable."""
    if not isinstance(rule_decl, Mapping):
        return ValidationRule(rule="")
    rule_text = rule_decl.get("rule")
    kept = {
        name: rule_decl[key]
        for key, name in _STATIC_KEYS
        if isinstance(rule_decl.get(key), str)
    }
    return ValidationRule(rule=rule_text if isinstance(rule_text, str) else "", **kept)


def _first_error(error: PydanticValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    first = details[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', '')}" if location else first.get("msg", "")
