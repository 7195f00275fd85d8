"""Packaging regression tests.

Tests that verify the package structure and import boundary.
"""

from pathlib import Path


def test_source_layout():
    """Test that the src/ layout holds kubecel, its kernel and _internal."""
    here = Path(__file__).resolve().parent
    repo_root = here.parent
    src_kubecel = repo_root / "src" / "kubecel"

    assert src_kubecel.exists(), "kubecel package should exist in src/"
    assert (src_kubecel / "kernel").exists(), "kubecel.kernel package should exist in src/"
    assert (src_kubecel / "_internal").exists(), "kubecel._internal should exist"
    assert (repo_root / "pyproject.toml").exists()


def test_import_boundary():
    """Test that kubecel and kernel import, and the version is resolvable."""
    import kubecel
    import kubecel.kernel  # noqa: F401

    # "dev" when running from a source checkout without metadata
    assert kubecel.__version__ in ("0.1.0", "dev")


def test_console_script_entry_point():
    from kubecel.cli import main
    assert callable(main)
