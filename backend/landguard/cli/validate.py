"""CLI for validating GeoJSON boundary files."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from landguard.config import get_settings
from landguard.geometry.validator import PolygonValidator
from landguard.models.schemas.validation import ValidationResult

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def validate_files(
    paths: list[str],
    validator: Optional[PolygonValidator] = None,
) -> dict[str, ValidationResult]:
    """
    Validate each GeoJSON file.

    Args:
        paths: Files to read
        validator: Validator to use (default: built from settings)

    Returns:
        Mapping of path to its ValidationResult
    """
    validator = validator or PolygonValidator(get_settings())
    results: dict[str, ValidationResult] = {}

    for path in paths:
        text = Path(path).read_text(encoding="utf-8")
        result = validator.validate(text)
        results[path] = result

        if result.is_valid:
            logger.info(f"{path}: valid ({len(result.warnings)} warning(s))")
        else:
            logger.warning(f"{path}: invalid - {result.errors[0]}")

    return results


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point. Returns 1 if any file is missing or invalid."""
    parser = argparse.ArgumentParser(
        description="Validate land parcel boundaries stored as GeoJSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  landguard-validate parcel.geojson
  landguard-validate --indent 2 plots/*.geojson
  python -m landguard.cli.validate parcel.json
        """,
    )

    parser.add_argument(
        "files",
        nargs="+",
        help="GeoJSON files to validate",
    )

    parser.add_argument(
        "--indent",
        type=int,
        default=None,
        help="Indent the JSON report",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    valid_paths = []
    missing = 0
    for file_path in args.files:
        path = Path(file_path)
        if not path.is_file():
            logger.error(f"File not found: {file_path}")
            missing += 1
            continue
        valid_paths.append(file_path)

    results = validate_files(valid_paths)
    report = {path: result.model_dump() for path, result in results.items()}
    print(json.dumps(report, indent=args.indent))

    if missing or not all(r.is_valid for r in results.values()):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
