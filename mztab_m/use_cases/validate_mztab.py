import argparse
import logging
import os
from dataclasses import asdict

from mztab_m.constants import Section
from mztab_m.core.config import load_properties
from mztab_m.core.errors import Level
from mztab_m.parsers.mztab_file_parser import MZTabFileParser


def print_report(file_path: str, parsed_data):
    print(f"\n{'='*60}")
    print(f"Validating: {os.path.basename(file_path)}")
    print(f"{'='*60}")

    all_issues = list(parsed_data.error_list)
    errors = [e for e in all_issues if e.level == Level.Error]
    warnings = [e for e in all_issues if e.level == Level.Warn]

    if all_issues:
        parts = []
        if errors:
            parts.append(f"{len(errors)} error(s)")
        if warnings:
            parts.append(f"{len(warnings)} warning(s)")
        if len(all_issues) > len(errors) + len(warnings):
            parts.append(f"{len(all_issues) - len(errors) - len(warnings)} info message(s)")
        print(f"\n{' and '.join(parts)} found:")

        # Group: category -> issues
        by_category: dict = {}
        for item in all_issues:
            by_category.setdefault(str(item.category), []).append(item)

        for category, group in by_category.items():
            print(f"\n{category}:")
            for item in group:
                label = {Level.Error: "ERROR", Level.Warn: "WARN ", Level.Info: "INFO "}[item.level]
                print(f"  {label}  line {item.line_number} [{item.type.code}]: {item.message}")
    else:
        print("\nValidation passed: no errors or warnings.")

    if parsed_data.fatal_error is not None:
        print(f"\nParsing stopped at line {parsed_data.fatal_error.line_number}.")
    if parsed_data.overflow:
        print(f"\nToo many problems; only the first {parsed_data.error_list.max_error_count} are shown.")

    metadata = parsed_data.metadata
    print(f"\nSummary:")
    print(f"  mzTab-version: {metadata.mz_tab_version or 'N/A'}")
    print(f"  mzTab-ID: {metadata.mz_tab_id or 'N/A'}")
    for name, count in metadata.summary().items():
        print(f"  {name}: {count}")
    for section in (Section.Small_Molecule, Section.Small_Molecule_Feature, Section.Small_Molecule_Evidence):
        print(f"  {section} rows: {len(parsed_data.records(section))}")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Validate mzTab-M files")
    parser.add_argument("files", nargs="+", help="mzTab-M files to validate")
    parser.add_argument("--config", help="YAML file with level / max_error_count / encoding overrides")
    parser.add_argument("--level", choices=[str(level) for level in Level],
                        help="lowest severity to report")
    parser.add_argument("--max-errors", type=int, help="stop after this many problems")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    overrides = asdict(load_properties(args.config))
    if args.level:
        overrides["level"] = args.level
    if args.max_errors is not None:
        overrides["max_error_count"] = args.max_errors
    properties = load_properties(overrides)

    exit_code = 0
    for file_path in args.files:
        parsed_data = MZTabFileParser(properties).parse_file(file_path)
        print_report(file_path, parsed_data)
        if not parsed_data.is_valid:
            exit_code = 1
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
