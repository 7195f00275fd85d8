"""kubecel CLI: validate objects against CRD validation rules offline."""

import argparse
import json
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path


def main():
    """Main CLI entry point for kubecel commands."""
    try:
        kubecel_version = get_version("kubecel")
    except PackageNotFoundError:
        kubecel_version = "dev"

    parser = argparse.ArgumentParser(
        prog="kubecel",
        description="kubecel: evaluate Kubernetes x-kubernetes-validations rules without a cluster"
    )
    parser.add_argument("--version", action="version", version=f"kubecel {kubecel_version}")
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Print only the error lines (no status summary)."
    )
    parent_parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log rule compilation and evaluation details to stderr."
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate an object (and optional old object) against a schema or CRD",
        parents=[parent_parser]
    )
    validate_parser.add_argument(
        "--schema",
        type=Path,
        required=True,
        help="Path to an openAPIV3Schema JSON file or a CRD manifest (JSON)"
    )
    validate_parser.add_argument(
        "--crd-version",
        dest="crd_version",
        default=None,
        help="CRD version whose schema to use (defaults to the first version)"
    )
    validate_parser.add_argument(
        "--object",
        type=Path,
        required=True,
        help="Path to the object JSON"
    )
    validate_parser.add_argument(
        "--old-object",
        dest="old_object",
        type=Path,
        default=None,
        help="Path to the previous object JSON (enables transition rules)"
    )
    validate_parser.add_argument(
        "--json",
        dest="as_json",
        action="store_true",
        help="Print errors as a JSON list"
    )

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(2)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if args.command == "validate":
        from .api import extract_crd_schema, load_json, validate
        from ._internal.canonical_json import dump_errors

        try:
            schema = extract_crd_schema(load_json(args.schema), args.crd_version)
            obj = load_json(args.object)
            old_obj = load_json(args.old_object) if args.old_object else None
        except FileNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(2)
        except json.JSONDecodeError as e:
            print(f"Error: invalid JSON: {e}", file=sys.stderr)
            sys.exit(2)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(2)

        errors = validate(schema, obj, old_obj)

        if args.as_json:
            print(dump_errors(errors))
        else:
            for error in errors:
                print(f"[{error.field_path}] {error.message}")
            if not args.quiet:
                if errors:
                    print(f"Status: FAILED ({len(errors)} errors)")
                else:
                    print("Status: OK")

        sys.exit(1 if errors else 0)


if __name__ == "__main__":
    main()
