#!/usr/bin/env python3
"""Pre-commit hook to prevent direct wall-clock reads in engine code.

Team Agreement:
> Every session timestamp comes from the injected clock - no time.time(),
> time.time_ns(), datetime.now() or datetime.utcnow() in engine code

The only file allowed to read the wall clock is the clock port itself.

Usage:
    python scripts/check_no_wall_clock.py [package_directory]

Exit codes:
    0: No violations found
    1: Violations found
"""

import re
import sys
from pathlib import Path

PACKAGE_NAME = "conditioning_studio"

# Matches: time.time(), time.time_ns(), datetime.now(), datetime.utcnow(), date.today()
WALL_CLOCK_PATTERN = re.compile(
    r"\b(?:time\s*\.\s*time(?:_ns)?|datetime\s*\.\s*(?:now|utcnow)|date\s*\.\s*today)\s*\("
)

# The clock port is THE source of time
ALLOWED_FILES = {
    "application/ports/clock.py",
}


def check_file(file_path: Path) -> list[tuple[int, str]]:
    """Check a single file for wall-clock reads.

    Returns:
        List of (line_number, line_content) tuples for violations.
    """
    violations: list[tuple[int, str]] = []

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return violations

    for line_num, line in enumerate(content.splitlines(), start=1):
        if line.lstrip().startswith("#"):
            continue
        if WALL_CLOCK_PATTERN.search(line):
            violations.append((line_num, line.strip()))

    return violations


def find_violations(package_dir: Path) -> dict[str, list[tuple[int, str]]]:
    """Scan a package directory for wall-clock reads outside the clock port."""
    all_violations: dict[str, list[tuple[int, str]]] = {}
    for py_file in sorted(package_dir.rglob("*.py")):
        relative_path = py_file.relative_to(package_dir).as_posix()
        if relative_path in ALLOWED_FILES:
            continue
        violations = check_file(py_file)
        if violations:
            all_violations[relative_path] = violations
    return all_violations


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the pre-commit hook.

    Returns:
        Exit code: 0 for success, 1 for violations found.
    """
    args = sys.argv[1:] if argv is None else argv
    package_dir = Path(args[0]) if args else Path(PACKAGE_NAME)

    if not package_dir.exists():
        print(f"Warning: {package_dir}/ directory not found, skipping check")
        return 0

    all_violations = find_violations(package_dir)
    if not all_violations:
        print(f"No wall-clock reads found in {package_dir}/")
        return 0

    print("Direct wall-clock reads detected!")
    print()
    for file_path, violations in sorted(all_violations.items()):
        print(f"  {file_path}:")
        for line_num, line_content in violations:
            print(f"    Line {line_num}: {line_content}")
        print()
    print("How to fix:")
    print("  Read time through the session clock (Clock from application/ports/clock.py)")
    return 1


if __name__ == "__main__":
    sys.exit(main())
