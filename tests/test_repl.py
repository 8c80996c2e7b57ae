import builtins
from collections.abc import Iterator

import pytest

import microml.microml_repl
from microml.microml_repl import (
    evaluate,
    handle_command,
    paren_balance,
    print_traceback,
    start_repl,
)


def feed(monkeypatch: pytest.MonkeyPatch, *lines: str) -> list[str]:
    prompts: list[str] = []
    calls: Iterator[str] = iter(lines)

    def fake_input(prompt: str) -> str:
        prompts.append(prompt)
        return next(calls)

    monkeypatch.setattr(builtins, "input", fake_input)
    return prompts


def test_repl_quit(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    feed(monkeypatch, "quit")
    start_repl()
    out = capsys.readouterr().out
    assert "MicroML REPL [format=tree]" in out
    assert "Exiting MicroML REPL" in out


def test_repl_exit(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    feed(monkeypatch, "exit")
    start_repl()
    assert "Exiting MicroML REPL" in capsys.readouterr().out


def test_repl_eof_exits(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    def raise_eof(prompt: str) -> str:
        raise EOFError

    monkeypatch.setattr(builtins, "input", raise_eof)
    start_repl()
    assert "Exiting MicroML REPL" in capsys.readouterr().out


def test_repl_keyboard_interrupt_exits(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def raise_interrupt(prompt: str) -> str:
        raise KeyboardInterrupt

    monkeypatch.setattr(builtins, "input", raise_interrupt)
    start_repl()
    assert "Exiting MicroML REPL" in capsys.readouterr().out


def test_repl_empty_input_skipped(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, "   ", "quit")
    start_repl()
    out = capsys.readouterr().out
    assert "[error]" not in out


def test_repl_prints_tree(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    feed(monkeypatch, "let x = 5 in x + 3", "quit")
    start_repl()
    out = capsys.readouterr().out
    assert "Let (x)" in out
    assert "└── BinaryOp (+)" in out


def test_repl_multiline_while_parens_open(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    prompts = feed(monkeypatch, "(fun x ->", "  x + 1) 2", "quit")
    start_repl(fmt="source")
    assert prompts == [">>> ", "... ", ">>> "]
    assert "(fun x -> x + 1) 2" in capsys.readouterr().out


def test_repl_reports_parse_error_and_continues(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, "let x = 5", "1 + 1", "quit")
    start_repl()
    out = capsys.readouterr().out
    assert "[error] >>>" in out
    assert "Expected IN, found end of input" in out
    assert "BinaryOp (+)" in out


def test_repl_reports_lex_error(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    feed(monkeypatch, "@@@", "quit")
    start_repl()
    assert "Unexpected character '@'" in capsys.readouterr().out


def test_repl_format_switch(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    feed(monkeypatch, ":json", "x", ":source", "f (g x)", "quit")
    start_repl()
    out = capsys.readouterr().out
    assert "[mode] >>> Output format json" in out
    assert '"nodeType": "Variable"' in out
    assert "f (g x)" in out


def test_repl_strict_toggle(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    feed(monkeypatch, ":strict", "x ;", ":strict", "quit")
    start_repl()
    out = capsys.readouterr().out
    assert "[mode] >>> Strict mode ON" in out
    assert "Expected end of input" in out
    assert "[mode] >>> Strict mode OFF" in out


def test_repl_verbose_mode_echoes_tokens(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    feed(monkeypatch, "verbose-mode", "f 1", "quit")
    start_repl()
    out = capsys.readouterr().out
    assert "[mode] >>> Verbose mode ON" in out
    assert "[tokens] >>> [Token(IDENT, f), Token(NUMBER, 1)]" in out


def test_handle_command_ignores_source() -> None:
    state: dict[str, object] = {"fmt": "tree", "strict": False, "verbose": False}
    assert not handle_command("f x", state)
    assert not handle_command(":svg", state)
    assert state == {"fmt": "tree", "strict": False, "verbose": False}


def test_paren_balance() -> None:
    assert paren_balance("((x)") == 1
    assert paren_balance("x))") == -2


def test_evaluate_unexpected_error_prints_traceback(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    def boom(*args: object, **kwargs: object) -> str:
        raise RuntimeError("renderer exploded")

    monkeypatch.setattr(microml.microml_repl, "render", boom)
    evaluate("x", {"fmt": "tree", "strict": False, "verbose": False})
    out = capsys.readouterr().out
    assert "[error] >>>" in out
    assert "RuntimeError: renderer exploded" in out


def test_print_traceback_outputs_error(capsys: pytest.CaptureFixture[str]) -> None:
    try:
        raise ValueError("test error")
    except ValueError:
        print_traceback()
    out = capsys.readouterr().out
    assert "ValueError: test error" in out
