#!/usr/bin/env python3
"""Generate docs/exit_codes.md from src/grin_codec/errors.py (single source of truth).

    python scripts/gen_exit_codes_md.py           # rewrite the doc
    python scripts/gen_exit_codes_md.py --check   # exit 1 if the doc is stale
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    ap.add_argument("--check", action="store_true", help="Only compare, do not write")
    ns = ap.parse_args(argv)

    repo = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo / "src"))

    from grin_codec import errors  # noqa: E402

    out = repo / "docs" / "exit_codes.md"
    text = errors.render_exit_codes_markdown()

    if ns.check:
        current = out.read_text(encoding="utf-8") if out.is_file() else None
        if current != text:
            print(f"[grin] {out} is stale, regenerate it", file=sys.stderr)
            return 1
        print(f"[grin] {out} up to date")
        return 0

    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding="utf-8")
    print(f"[grin] wrote {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
