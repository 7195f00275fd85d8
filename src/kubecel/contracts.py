"""Public models for kubecel: rule declarations and validation errors."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ValidationRule(BaseModel):
    """One entry of a schema node's ``x-kubernetes-validations`` list.

    Field names follow the Kubernetes wire shape (camelCase) so rules copied
    out of a live CRD load unchanged; snake_case names are accepted too.
    """
    rule: str  # CEL expression, e.g. "self.replicas >= 0"
    message: Optional[str] = None
    message_expression: Optional[str] = Field(None, alias="messageExpression")
    reason: Optional[str] = None  # e.g. "FieldValueInvalid", passed through untouched
    field_path: Optional[str] = Field(None, alias="fieldPath")
    optional_old_self: Optional[bool] = Field(None, alias="optionalOldSelf")

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class ValidationError(BaseModel):
    """A rule that did not hold for the value at ``field_path``.

    Not an exception: a list of these is the result of a validate call.
    """
    field_path: str  # e.g. "spec.containers[1]", "" for the root
    message: str
    reason: Optional[str] = None
    rule: str = ""  # Expression text of the rule that produced this error

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        if not self.field_path:
            return self.message
        return f"{self.field_path}: {self.message}"
