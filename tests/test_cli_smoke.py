from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import pytest

from grin_codec.errors import EXIT_BAD_FORMAT, EXIT_TRUNCATED


def _run_cli(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    """Run grin CLI through a python -c wrapper.

    This avoids assuming the console-script entrypoint is installed.
    """
    cmd = [
        sys.executable,
        "-c",
        "from grin_codec.cli import main; raise SystemExit(main())",
        *args,
    ]
    src = str(Path(__file__).resolve().parents[1] / "src")
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(p for p in (src, env.get("PYTHONPATH")) if p)
    return subprocess.run(
        cmd,
        cwd=str(cwd) if cwd else None,
        env=env,
        text=True,
        capture_output=True,
    )


def test_cli_encode_decode_roundtrip(tmp_path: Path) -> None:
    inp = tmp_path / "in.txt"
    out = tmp_path / "out.grin"
    back = tmp_path / "back.txt"

    data = "HELLO 123\nRIGA ARTICOLO: vite M3 qty=10 prezzo=1.20\n"
    inp.write_text(data, encoding="utf-8")

    r = _run_cli("encode", str(inp), str(out))
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert out.read_bytes()[:4] == b"\x00\x00\x07\x36"

    r = _run_cli("decode", str(out), str(back))
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert back.read_text(encoding="utf-8") == data


def test_cli_encode_stats(tmp_path: Path) -> None:
    inp = tmp_path / "in.txt"
    inp.write_text("aaaaaaaaab\n" * 30, encoding="utf-8")

    r = _run_cli("encode", str(inp), str(tmp_path / "o.grin"), "--stats")
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert "=== grin stats ===" in r.stdout
    assert "ratio" in r.stdout


def test_cli_encode_stats_empty_file(tmp_path: Path) -> None:
    inp = tmp_path / "empty"
    inp.write_bytes(b"")

    r = _run_cli("encode", str(inp), str(tmp_path / "o.grin"), "--stats")
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert "no meaningful ratio" in r.stdout


@pytest.mark.parametrize(
    "args",
    [
        (),
        ("compress", "a", "b"),
        ("encode", "only-one-arg"),
        ("decode",),
        ("encode", "a", "b", "c"),
    ],
)
def test_cli_bad_invocation_prints_usage_exit_0(args: tuple[str, ...]) -> None:
    r = _run_cli(*args)
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert "usage:" in r.stdout


def test_cli_decode_bad_magic_is_fatal(tmp_path: Path) -> None:
    inp = tmp_path / "bogus.grin"
    back = tmp_path / "back"
    inp.write_bytes(b"not a grin file at all")

    r = _run_cli("decode", str(inp), str(back))
    assert r.returncode == EXIT_BAD_FORMAT
    assert "[grin]" in r.stderr
    assert not back.exists()


def test_cli_decode_bad_magic_debug_raises(tmp_path: Path) -> None:
    inp = tmp_path / "bogus.grin"
    inp.write_bytes(b"\x00\x00\x00\x00")

    r = _run_cli("decode", str(inp), str(tmp_path / "back"), "--debug")
    assert r.returncode != 0
    assert "Traceback" in r.stderr
    assert "BadMagic" in r.stderr


def test_cli_strict_decode_truncated(tmp_path: Path) -> None:
    inp = tmp_path / "cut.grin"
    # AAB tree header + seven A and a dangling bit
    inp.write_bytes(bytes.fromhex("0000073688310900") + b"\x01")

    r = _run_cli("decode", str(inp), str(tmp_path / "lenient"))
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert (tmp_path / "lenient").read_bytes() == b"AAAAAAA"

    r = _run_cli("decode", str(inp), str(tmp_path / "strict"), "--strict")
    assert r.returncode == EXIT_TRUNCATED
    assert not (tmp_path / "strict").exists()


def test_cli_missing_input_is_generic_error(tmp_path: Path) -> None:
    r = _run_cli("encode", str(tmp_path / "nope"), str(tmp_path / "out.grin"))
    assert r.returncode == 10
    assert "[grin] error:" in r.stderr


def test_cli_verify(tmp_path: Path) -> None:
    inp = tmp_path / "in.bin"
    out = tmp_path / "out.grin"
    inp.write_bytes(b"\x00\x01\x02\x03\xff" * 10)
    assert _run_cli("encode", str(inp), str(out)).returncode == 0

    r = _run_cli("verify", str(out))
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert r.stdout.startswith("OK")
    assert "decoded size : 50 byte" in r.stdout


@pytest.mark.parametrize("args", [[], ["compress"], ["decode", "x"], ["--version"], ["encode", "--help"]])
def test_main_returns_instead_of_exiting(args: list[str], capsys: pytest.CaptureFixture[str]) -> None:
    from grin_codec.cli import main

    assert main(args) == 0
    assert capsys.readouterr().out


def test_main_returns_exit_code_on_error(tmp_path: Path) -> None:
    from grin_codec.cli import main
    from grin_codec.errors import EXIT_INVALID_INPUT

    inp = tmp_path / "in.txt"
    inp.write_text("abc", encoding="utf-8")
    assert main(["encode", str(inp), str(inp)]) == EXIT_INVALID_INPUT
    assert inp.read_text(encoding="utf-8") == "abc"


def test_cli_verify_lenient_warns_on_missing_eof(tmp_path: Path) -> None:
    cut = tmp_path / "cut.grin"
    cut.write_bytes(bytes.fromhex("0000073688310900") + b"\x01")

    r = _run_cli("verify", str(cut))
    assert r.returncode == EXIT_TRUNCATED

    r = _run_cli("verify", str(cut), "--lenient")
    assert r.returncode == 0, (r.stdout, r.stderr)
    assert "EOF reached  : no" in r.stdout
    assert "[grin] warning:" in r.stderr
