"""Field path construction for validation errors.

Paths are always built from the validation root (``""``):
- property or map key: ``spec`` -> ``spec.replicas``
- list element: ``spec.containers`` -> ``spec.containers[1]``
- a rule's fieldPath is appended to the path of the node that owns the rule
"""


def join_field(base: str, name: str) -> str:
    """Append a property name or map key."""
    if not base:
        return name
    return f"{base}.{name}"


def join_index(base: str, index: int) -> str:
    """Append a list index."""
    return f"{base}[{index}]"


def join_relative(base: str, relative: str) -> str:
    """Append a rule's fieldPath (``.a.b``, ``['x.y']``, or ``a.b``)."""
    relative = relative.strip()
    if not relative:
        return base
    if relative.startswith("["):
        return f"{base}{relative}"
    if relative.startswith("."):
        relative = relative[1:]
    return join_field(base, relative)
