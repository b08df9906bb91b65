from __future__ import annotations

import io

import pytest

from arrowmap.runner import check, main, run
from tests.support.harness import TARGET_TEXT, ErrorKind, LexError, RewriteError

MAP_SOURCE = 'let m = {"a" => 1};'
MAP_EXPECTED = f'let m = {TARGET_TEXT}(("a", 1));'


def test_run_expands_source() -> None:
    assert run(MAP_SOURCE) == MAP_EXPECTED


def test_run_reads_mode_from_env(monkeypatch) -> None:
    monkeypatch.setenv("ARROWMAP_STRICT", "1")
    with pytest.raises(RewriteError):
        run('{"a" =>}')

    monkeypatch.setenv("ARROWMAP_STRICT", "0")
    assert run('{"a" =>}') == '{ "a" => }'


def test_run_explicit_mode_wins_over_env(monkeypatch) -> None:
    monkeypatch.setenv("ARROWMAP_STRICT", "yes")
    assert run('{"a" =>}', strict=False) == '{ "a" => }'


def test_run_lex_error() -> None:
    with pytest.raises(LexError) as exc_info:
        run('{"a" => "unterminated}')

    assert exc_info.value.line == 1


def test_check_collects_diagnostics() -> None:
    diags = check('f({"a" =>}, {"b" => 1}, {1.5 => 2})')
    assert [d.kind for d in diags] == [ErrorKind.EXPECTED_VALUE, ErrorKind.EXPECTED_KEY_LITERAL]


def test_main_literal_argument(capsys) -> None:
    main([MAP_SOURCE])
    assert capsys.readouterr().out == MAP_EXPECTED + "\n"


def test_main_reads_file(tmp_path, capsys) -> None:
    path = tmp_path / "input.rs"
    path.write_text(MAP_SOURCE, encoding="utf-8")

    main([str(path)])
    assert capsys.readouterr().out == MAP_EXPECTED + "\n"


def test_main_reads_stdin(monkeypatch, capsys) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(MAP_SOURCE))

    main(["-"])
    assert capsys.readouterr().out == MAP_EXPECTED + "\n"


def test_main_empty_stdin(monkeypatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(""))

    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert "No input" in str(exc_info.value.code)


def test_main_lark_reader(capsys) -> None:
    main(["--lark", MAP_SOURCE])
    assert capsys.readouterr().out == MAP_EXPECTED + "\n"


def test_main_strict_failure_reports_diagnostic(capsys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["--strict", '{"key" =>}'])

    assert exc_info.value.code == 1
    err = capsys.readouterr().err
    assert "<input>:1:10: error: expected value after separator" in err
    assert '{"key" =>}' in err
    assert "         ^" in err


def test_main_tolerant_overrides_env(monkeypatch, capsys) -> None:
    monkeypatch.setenv("ARROWMAP_STRICT", "1")

    main(["--tolerant", '{"key" =>}'])
    assert capsys.readouterr().out == '{ "key" => }\n'


def test_main_check(capsys) -> None:
    main(["--check", MAP_SOURCE])
    assert capsys.readouterr().out == ""

    with pytest.raises(SystemExit) as exc_info:
        main(["--check", '{"a" => 1, b => 2}'])
    assert exc_info.value.code == 1
    assert "expected literal key" in capsys.readouterr().err


def test_main_lex_error(capsys) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["(]"])

    assert exc_info.value.code == 1
    assert capsys.readouterr().err.startswith("<input>:1:2: error: Mismatched closing delimiter")


def test_main_help(capsys) -> None:
    main(["--help"])
    assert capsys.readouterr().out.startswith("usage: arrowmap")


def test_main_unknown_flag() -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["--frobnicate"])
    assert "Unknown flag: --frobnicate" in str(exc_info.value.code)


def test_main_extra_argument() -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["a", "b"])
    assert "Unexpected argument: b" in str(exc_info.value.code)


def test_main_lark_reader_deep_input(monkeypatch, capsys) -> None:
    depth = 3000
    monkeypatch.setattr("sys.stdin", io.StringIO("(" * depth + '{"a" => 1}' + ")" * depth))

    main(["--lark", "-"])

    out = capsys.readouterr().out
    assert out.count("hash_map_fn") == 1
    assert out.endswith(")" * depth + "\n")
