"""kubecel: offline evaluation of Kubernetes x-kubernetes-validations CEL rules."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("kubecel")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from kubecel.api import (
    validate,
    validate_compiled,
    compile_schema,
    compile_rule,
    compile_schema_validations,
)
from kubecel.contracts import ValidationError, ValidationRule
from kubecel.kernel.environment import CelContext, build_context
from kubecel.kernel.rules import CompiledRule
from kubecel.kernel.schema import CompiledSchema
from kubecel.kernel.validator import Validator

__all__ = [
    "__version__",
    "validate",
    "validate_compiled",
    "compile_schema",
    "compile_rule",
    "compile_schema_validations",
    "ValidationError",
    "ValidationRule",
    "CelContext",
    "build_context",
    "CompiledRule",
    "CompiledSchema",
    "Validator",
]
