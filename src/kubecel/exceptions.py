"""Exception types for kubecel.

None of these reach callers of ``validate``: compile errors are folded into
static-only rules and evaluation errors into ``ValidationError`` results.
They exist so the kernel can signal failure across its own seams.
"""


class KubeCelError(Exception):
    """Base exception for kubecel errors."""
    pass


class CompileError(KubeCelError):
    """A CEL expression failed to parse."""

    def __init__(self, expression: str, detail: str):
        self.expression = expression
        self.detail = detail
        super().__init__(f"failed to compile rule \"{expression}\": {detail}")


class EvaluationError(KubeCelError):
    """A compiled expression failed at runtime or returned the wrong type."""

    def __init__(self, expression: str, detail: str):
        self.expression = expression
        self.detail = detail
        super().__init__(f"rule \"{expression}\" evaluation error: {detail}")
