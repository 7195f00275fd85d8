"""Validation kernel: value bridge, rule and schema compilers, validator."""
