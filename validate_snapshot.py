#!/usr/bin/env python3
"""Validate fleet snapshot YAML files against the schema."""
import datetime
import sys
from pathlib import Path

import yaml
from jsonschema import validate, ValidationError


def load_schema() -> dict:
    """Load the JSON schema from schema.yaml."""
    schema_path = Path(__file__).parent / "schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def _stringify_dates(node):
    """YAML reads unquoted dates as date objects; the schema expects strings."""
    if isinstance(node, dict):
        return {k: _stringify_dates(v) for k, v in node.items()}
    if isinstance(node, list):
        return [_stringify_dates(v) for v in node]
    if isinstance(node, datetime.date):
        return node.isoformat()
    return node


def validate_snapshot_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single snapshot YAML file. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
        validate(instance=_stringify_dates(data), schema=schema)
    except yaml.YAMLError as e:
        errors.append(f"YAML parse error: {e}")
    except ValidationError as e:
        errors.append(f"Schema validation error: {e.message}")
        if e.path:
            errors.append(f"  at path: {'.'.join(str(p) for p in e.path)}")
    except OSError as e:
        errors.append(f"Error: {e}")
    return errors


def main(argv=None):
    """Validate the given files, or every snapshot in snapshots/."""
    schema = load_schema()
    argv = sys.argv[1:] if argv is None else argv

    if argv:
        yaml_files = [Path(p) for p in argv]
    else:
        snapshots_dir = Path(__file__).parent / "snapshots"
        if not snapshots_dir.exists():
            print(f"Error: snapshots directory not found: {snapshots_dir}")
            return 1
        yaml_files = list(snapshots_dir.glob("*.yaml")) + list(snapshots_dir.glob("*.yml"))

    if not yaml_files:
        print("Warning: No YAML files found")
        return 0

    all_valid = True
    for filepath in sorted(yaml_files):
        errors = validate_snapshot_file(filepath, schema)
        if errors:
            print(f"FAIL: {filepath.name}")
            for error in errors:
                print(f"  {error}")
            all_valid = False
        else:
            print(f"OK: {filepath.name}")

    return 0 if all_valid else 1


if __name__ == "__main__":
    sys.exit(main())
