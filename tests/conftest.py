"""Pytest configuration and shared schema fixtures.

No sys.path hacks - tests import from the installed kubecel package.
"""

import pytest


def pytest_addoption(parser):
    """Add gated perf test option."""
    parser.addoption(
        "--run-perf",
        action="store_true",
        default=False,
        help="Run performance sentinel benchmarks (gated)."
    )


def pytest_collection_modifyitems(config, items):
    """Skip perf-marked tests unless --run-perf is set."""
    if config.getoption("--run-perf"):
        return
    skip_perf = pytest.mark.skip(reason="perf tests gated; pass --run-perf")
    for item in items:
        if "perf" in item.keywords:
            item.add_marker(skip_perf)


@pytest.fixture
def replicas_schema():
    """Two-level schema: a rule on spec and a rule on spec.replicas."""
    return {
        "type": "object",
        "properties": {
            "spec": {
                "type": "object",
                "properties": {
                    "replicas": {
                        "type": "integer",
                        "x-kubernetes-validations": [
                            {"rule": "self >= 0", "message": "replicas must be non-negative"}
                        ],
                    }
                },
                "x-kubernetes-validations": [
                    {"rule": "self.replicas >= 1", "message": "at least one replica required"}
                ],
            }
        },
    }


@pytest.fixture
def scale_down_schema():
    """Root-level transition rule forbidding a decrease in replicas."""
    return {
        "type": "object",
        "properties": {"replicas": {"type": "integer"}},
        "x-kubernetes-validations": [
            {"rule": "self.replicas >= oldSelf.replicas", "message": "cannot scale down"}
        ],
    }


@pytest.fixture
def time_schema():
    """Schema with date-time and duration formatted fields."""
    return {
        "type": "object",
        "properties": {
            "spec": {
                "type": "object",
                "properties": {
                    "expiresAt": {"type": "string", "format": "date-time"},
                    "timeout": {"type": "string", "format": "duration"},
                },
                "x-kubernetes-validations": [
                    {
                        "rule": "self.expiresAt > timestamp('2024-01-01T00:00:00Z')",
                        "message": "must expire after 2024-01-01",
                    },
                    {
                        "rule": "self.timeout <= duration('3600s')",
                        "message": "timeout must be at most 1 hour",
                    },
                ],
            }
        },
    }
