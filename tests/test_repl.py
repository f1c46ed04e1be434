import builtins

from flux import repl
from flux.interpreter import Interpreter


def feed(monkeypatch, lines):
    """Replace `input` with a scripted session; returns the prompts shown."""
    pending = list(lines)
    prompts = []

    def fake_input(prompt=''):
        prompts.append(prompt)
        if not pending:
            raise EOFError
        return pending.pop(0)

    monkeypatch.setattr(builtins, 'input', fake_input)
    return prompts


def session_output(capsys):
    lines = capsys.readouterr().out.split('\n')
    assert lines[:3] == repl.BANNER
    return lines[3:-1]


def test_repl_session(monkeypatch, capsys):
    prompts = feed(monkeypatch, [
        'mut x = 2',
        'x * 21',
        'mut f = fn(a) {',
        'return a + 1',
        '}',
        'f(x)',
        'print("hi")',
        'y',
        'exit',
    ])
    repl.start(Interpreter())
    assert session_output(capsys) == [
        '42',
        '3',
        'hi',
        '  Whoops! We hit a snag:',
        '\tNameError: undefined variable y (at <stdin>:1:1)',
        'Shutting down...',
    ]
    assert prompts == ['>> ', '>> ', '>> ', '.. ', '.. ', '>> ', '>> ', '>> ', '>> ']


def test_repl_recovers_after_syntax_error(monkeypatch, capsys):
    feed(monkeypatch, ['mut = 1', 'mut ok = true', 'ok'])
    repl.start(Interpreter())
    out = session_output(capsys)
    assert out[0] == '  Whoops! We hit a snag:'
    assert out[1].startswith('\tParseError: ')
    assert out[2:] == ['true']


def test_repl_ends_quietly_at_end_of_input(monkeypatch, capsys):
    feed(monkeypatch, ['', 'mut s = "kept"', 's + "!"'])
    repl.start(Interpreter())
    assert session_output(capsys) == ['kept!']


def test_eval_source_returns_trailing_expression_value():
    interpreter = Interpreter()
    assert repl.eval_source(interpreter, 'mut n = 4\nn * n') == 16
    assert repl.eval_source(interpreter, 'n + 1') == 5


def test_repl_continues_open_string_literal(monkeypatch, capsys):
    prompts = feed(monkeypatch, ['mut nl = "', '"', 'len(nl)'])
    repl.start(Interpreter())
    assert session_output(capsys) == ['1']
    assert prompts == ['>> ', '.. ', '>> ', '>> ']
