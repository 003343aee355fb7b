import json
import logging
import sys
from pathlib import Path

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from formula.formula_cli import main, run_formula


def test_run_formula_string_prints_ast(capsys: pytest.CaptureFixture[str]) -> None:
    assert run_formula("let a = 1 + 2", is_string=True) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["kind"] == "formula"
    assert data["span"] == {"start": 0, "end": 13}
    decl = data["body"][0]["declarations"][0]
    assert decl["init"]["op"] == "+"


def test_run_formula_pretty_is_indented(capsys: pytest.CaptureFixture[str]) -> None:
    run_formula("a", is_string=True, pretty=True)
    out = capsys.readouterr().out
    assert out.startswith("{\n  ")


def test_run_formula_tokens(capsys: pytest.CaptureFixture[str]) -> None:
    assert run_formula("a.=b", is_string=True, tokens=True) == 0
    tokens = json.loads(capsys.readouterr().out)
    assert [t["kind"] for t in tokens] == ["Name", "DotEq", "Name"]
    assert tokens[0]["data"] == "a"
    assert "data" not in tokens[1]
    assert tokens[1]["span"] == {"start": 1, "end": 3}


def test_run_formula_tokens_with_trivia(capsys: pytest.CaptureFixture[str]) -> None:
    run_formula("a // c", is_string=True, tokens=True, trivia=True)
    tokens = json.loads(capsys.readouterr().out)
    assert [t["kind"] for t in tokens] == ["Name", "Whitespace", "Comment"]
    assert tokens[2]["text"] == "// c"


def test_run_formula_error_is_rendered(capsys: pytest.CaptureFixture[str]) -> None:
    assert run_formula("let = 1", is_string=True) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    lines = captured.err.splitlines()
    assert lines[0] == "( ParseError ) -> Expected a name"
    assert lines[1] == "  1 | let = 1"
    assert lines[2].endswith("^")


def test_run_formula_rejects_other_extensions() -> None:
    with pytest.raises(ValueError, match=r"Only \.formula files are supported"):
        run_formula("script.txt")


def test_run_formula_file_and_out(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    src_file = tmp_path / "test.formula"
    src_file.write_text("let x = [1, 2]", encoding="utf-8")
    out_file = tmp_path / "out.json"
    assert run_formula(str(src_file), out=str(out_file), pretty=True) == 0
    assert f"(wrote to {out_file})" in capsys.readouterr().out
    data = json.loads(out_file.read_text(encoding="utf-8"))
    assert data["body"][0]["kind"] == "Local"


def test_main_entry(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(sys, "argv", ["formula", "-s", "1 + 2", "-p"])
    main()
    data = json.loads(capsys.readouterr().out)
    assert data["body"][0]["expr"]["kind"] == "Binary"


def test_main_exits_with_error_status(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "argv", ["formula", "-s", "(1, 2)"])
    with pytest.raises(SystemExit) as excinfo:
        main()
    assert excinfo.value.code == 1


def test_main_verbose_enables_debug_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[int] = []
    monkeypatch.setattr(
        logging, "basicConfig", lambda **kwargs: calls.append(kwargs["level"])
    )
    monkeypatch.setattr(sys, "argv", ["formula", "--verbose", "-s", "a"])
    main()
    assert calls == [logging.DEBUG]


def test_main_no_args_opens_repl(monkeypatch: pytest.MonkeyPatch) -> None:
    called = {}
    monkeypatch.setattr(sys, "argv", ["formula"])
    monkeypatch.setattr(
        "formula.formula_repl.start_repl", lambda **kwargs: called.setdefault("repl", kwargs)
    )
    main()
    assert called["repl"] == {}


def test_main_repl_flag(monkeypatch: pytest.MonkeyPatch) -> None:
    called = {}
    monkeypatch.setattr(sys, "argv", ["formula", "--repl", "--tokens"])
    monkeypatch.setattr(
        "formula.formula_repl.start_repl", lambda **kwargs: called.setdefault("repl", kwargs)
    )
    main()
    assert called["repl"] == {"show_tokens": True}


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])  # type: ignore[misc]
@given(st.text(alphabet="ab1 +*()=;\n", max_size=40))  # type: ignore[misc]
def test_run_formula_status_matches_output(
    capsys: pytest.CaptureFixture[str], src: str
) -> None:
    status = run_formula(src, is_string=True)
    captured = capsys.readouterr()
    if status == 0:
        assert json.loads(captured.out)["kind"] == "formula"
    else:
        assert captured.err.startswith("( ")
