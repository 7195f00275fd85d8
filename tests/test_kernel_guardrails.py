"""Guardrails to keep kernel free of side effects and OS-specific dependencies."""

import re
from pathlib import Path


FORBIDDEN_PATTERNS = {
    "argparse": re.compile(r"\bargparse\b"),
    "pathlib.Path": re.compile(r"\bpathlib\.Path\b"),
    "open(": re.compile(r"(?<![A-Za-z0-9_])open\s*\("),
    "print(": re.compile(r"(?<![A-Za-z0-9_])print\s*\("),
    "warnings.": re.compile(r"\bwarnings\."),
    "datetime.now": re.compile(r"\bdatetime\.now\b"),
    "time.time": re.compile(r"\btime\.time\b"),
    "os.path": re.compile(r"\bos\.path\b"),
    "os.environ": re.compile(r"\bos\.environ\b"),
    "logging.basicConfig": re.compile(r"\blogging\.basicConfig\b"),
}


def test_kernel_has_no_forbidden_tokens():
    kernel_dir = Path(__file__).resolve().parents[1] / "src" / "kubecel" / "kernel"
    offenders = []

    for path in kernel_dir.glob("*.py"):
        contents = path.read_text(encoding="utf-8")
        for token, pattern in FORBIDDEN_PATTERNS.items():
            if pattern.search(contents):
                offenders.append(f"{path.name}: {token}")

    assert not offenders, "Forbidden kernel tokens found: " + ", ".join(offenders)


def test_kernel_loggers_are_module_scoped():
    """Kernel modules log through their own named logger, never the root logger."""
    kernel_dir = Path(__file__).resolve().parents[1] / "src" / "kubecel" / "kernel"
    root_calls = re.compile(r"\blogging\.(debug|info|warning|error|exception)\s*\(")
    offenders = [
        path.name for path in kernel_dir.glob("*.py")
        if root_calls.search(path.read_text(encoding="utf-8"))
    ]
    assert not offenders, "Root logger used in: " + ", ".join(offenders)
