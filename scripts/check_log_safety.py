#!/usr/bin/env python3
"""Log safety gate for runtime code.

Fails if:
- print( found in runtime code (src/**)
- A logger call mentions message content (text, body, author, phone)
  without passing it through safe_log_context/redact_*

Logger calls are checked as whole statements, so multi-line calls are
covered.

Usage:
    python scripts/check_log_safety.py [SRC_DIR]
"""

import re
import sys
from pathlib import Path

# Names that carry customer data in this codebase
SENSITIVE_KEYWORDS = (
    "message.text",
    ".body",
    "payload",
    "author",
    "phone",
    "quoted",
)

PRINT_PATTERN = re.compile(r"\bprint\s*\(")

LOGGER_CALL_PATTERN = re.compile(
    r"\blogger\.(debug|info|warning|error|critical|exception)\s*\("
)

REDACTION_PATTERNS = (
    "safe_log_context",
    "redact_value",
    "redact_string",
)


def _code_part(line: str) -> str:
    return line.split("#", 1)[0]


def _statement(lines: list[str], start: int) -> str:
    """Logger call starting at lines[start], up to its closing paren."""
    depth = 0
    parts: list[str] = []
    for line in lines[start:]:
        code = _code_part(line)
        parts.append(code)
        depth += code.count("(") - code.count(")")
        if depth <= 0:
            break
    return "\n".join(parts)


def check_file(filepath: Path) -> list[str]:
    """Check a single file for violations. Returns list of error messages."""
    errors = []
    try:
        content = filepath.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return []

    lines = content.splitlines()

    for index, line in enumerate(lines):
        lineno = index + 1
        if line.lstrip().startswith("#"):
            continue

        code = _code_part(line)
        if PRINT_PATTERN.search(code):
            errors.append(f"{filepath}:{lineno}: print() not allowed in runtime code")

        if not LOGGER_CALL_PATTERN.search(code):
            continue

        statement = _statement(lines, index)
        if any(rp in statement for rp in REDACTION_PATTERNS):
            continue
        statement_lower = statement.lower()
        for keyword in SENSITIVE_KEYWORDS:
            if keyword in statement_lower:
                errors.append(
                    f"{filepath}:{lineno}: logger call with '{keyword}' "
                    "must use redaction (safe_log_context/redact_value)"
                )

    return errors


def check_tree(src_dir: Path) -> list[str]:
    all_errors: list[str] = []
    for pyfile in sorted(src_dir.rglob("*.py")):
        all_errors.extend(check_file(pyfile))
    return all_errors


def main(argv: list[str] | None = None) -> int:
    """Run the gate on the src directory."""
    args = sys.argv[1:] if argv is None else argv
    src_dir = Path(args[0]) if args else Path("src")

    if not src_dir.exists():
        src_dir = Path(__file__).parent.parent / "src"

    if not src_dir.exists():
        sys.stderr.write("Error: src directory not found\n")
        return 1

    all_errors = check_tree(src_dir)
    if all_errors:
        sys.stderr.write("Log safety check FAILED:\n")
        for err in all_errors:
            sys.stderr.write(f"  {err}\n")
        return 1

    sys.stdout.write("Log safety check passed\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
