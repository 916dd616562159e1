#!/usr/bin/env python3
"""Validate vehicle YAML files against the schema."""
import argparse
import json
import sys
from pathlib import Path

import yaml
from jsonschema import validate, ValidationError

from motomaint.schedule import DATA_DIR


def load_schema() -> dict:
    """Load the JSON schema for vehicle files."""
    schema_path = DATA_DIR / "vehicle.schema.yaml"
    with open(schema_path) as f:
        return yaml.safe_load(f)


def validate_vehicle_file(filepath: Path, schema: dict) -> list[str]:
    """Validate a single vehicle YAML file. Returns list of errors."""
    errors = []
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
        # Unquoted YAML dates load as date objects; the schema expects strings
        data = json.loads(json.dumps(data, default=str))
        validate(instance=data, schema=schema)
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
    """Validate all vehicle YAML files in a directory."""
    parser = argparse.ArgumentParser(description="Validate vehicle YAML files")
    parser.add_argument(
        "vehicles_dir",
        type=Path,
        nargs="?",
        default=Path("vehicles"),
        help="Directory of vehicle YAML files (default: vehicles)",
    )
    args = parser.parse_args(argv)

    schema = load_schema()
    vehicles_dir = args.vehicles_dir

    if not vehicles_dir.exists():
        print(f"Error: vehicles directory not found: {vehicles_dir}")
        return 1

    yaml_files = list(vehicles_dir.glob("*.yaml")) + list(vehicles_dir.glob("*.yml"))

    if not yaml_files:
        print(f"Warning: No YAML files found in {vehicles_dir}")
        return 0

    all_valid = True
    for filepath in sorted(yaml_files):
        errors = validate_vehicle_file(filepath, schema)
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
