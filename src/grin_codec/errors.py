"""Typed errors for grin-codec.

Single source of truth for exit codes lives here.

Policy:
- Errors are small and boring.
- The CLI maps errors to stable exit codes (see EXIT_* constants).
- docs/exit_codes.md is generated from this module (scripts/gen_exit_codes_md.py).
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_INVALID_INPUT = 2
EXIT_GENERIC = 10
EXIT_BAD_FORMAT = 11
EXIT_TRUNCATED = 12


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success (also printed usage for an unknown invocation)"),
    ExitCodeInfo(EXIT_INVALID_INPUT, "INVALID_INPUT", "Invalid frequency map or byte not covered by the tree"),
    ExitCodeInfo(EXIT_GENERIC, "GENERIC", "Generic failure (I/O error, unexpected error, etc.)"),
    ExitCodeInfo(EXIT_BAD_FORMAT, "BAD_FORMAT", "Not a grin file (bad magic) or invalid tree header"),
    ExitCodeInfo(EXIT_TRUNCATED, "TRUNCATED", "Bit source exhausted inside the header or the payload"),
)

_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE - do not edit manually.\n")
    lines.append("> Source of truth: `src/grin_codec/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `python scripts/gen_exit_codes_md.py`.\n\n")
    lines.append("These are the CLI exit codes you can rely on.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- All internal errors extend `GrinError` and carry an `exit_code`.\n")
    lines.append("- `--debug` re-raises errors to show full stack traces.\n")
    lines.append("- Lenient decode (the default) stops silently on a truncated payload; `--strict` exits 12.\n")
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class GrinError(Exception):
    """Base error for grin-codec."""

    exit_code: int = EXIT_GENERIC


class InvalidInput(GrinError):
    exit_code = EXIT_INVALID_INPUT


class FormatError(GrinError):
    exit_code = EXIT_BAD_FORMAT


class BadMagic(FormatError):
    pass


class EndOfBits(GrinError):
    """Raised by BitReader when a read runs past the last byte."""

    exit_code = EXIT_TRUNCATED


class TruncatedHeader(GrinError):
    exit_code = EXIT_TRUNCATED


class TruncatedStream(GrinError):
    exit_code = EXIT_TRUNCATED
