import pytest
from flux.interpreter import parse_program, Interpreter, run_program
from flux.errors import FluxError


def run(source):
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    return interp


def output(capsys):
    return capsys.readouterr().out.strip().split('\n')


def error_of(source):
    with pytest.raises(FluxError) as excinfo:
        run(source)
    return excinfo.value.err


def test_string_number_concatenation(capsys):
    run('print("Level: " + 100)\nprint(7 + "up")\nprint("a" + "b")')
    assert output(capsys) == ['Level: 100', '7up', 'ab']


def test_division_truncates_toward_zero(capsys):
    run('print(7 / 2, " ", -7 / 2, " ", 7 / -2, " ", -7 / -2)')
    assert output(capsys) == ['3 -3 -3 3']


def test_modulo_identity_holds_for_division(capsys):
    run(
        'mut mod = fn(a, b) { return a - (b * (a / b)) }\n'
        'print(mod(17, 5), " ", mod(100, 7), " ", mod(4, 9), " ", mod(-17, 5))'
    )
    assert output(capsys) == ['2 2 4 -2']


def test_fixed_seed_generator_sequence(capsys):
    run(
        'mut seed = 12345\n'
        'mut rand = fn(n) {\n'
        '    mut next = seed * 13 + 7\n'
        '    mut seed = next - (100 * (next / 100))\n'
        '    return seed - (n * (seed / n))\n'
        '}\n'
        'print(rand(100), " ", rand(100), " ", rand(100), " ", rand(100))'
    )
    assert output(capsys) == ['92 3 46 5']


def test_loop_accumulator_mutates_enclosing_binding(capsys):
    run(
        'mut total = 0\n'
        'mut i = 1\n'
        'while (i < 11) {\n'
        '    mut total = total + i\n'
        '    mut i = i + 1\n'
        '}\n'
        'print(total)'
    )
    assert output(capsys) == ['55']


def test_block_temporaries_do_not_leak():
    err = error_of('if (true) { mut temp = 5 }\nprint(temp)')
    assert err.name == 'NameError'
    assert 'temp' in err.message
    assert (err.line, err.column) == (2, 7)


def test_loop_body_gets_fresh_frame_each_iteration(capsys):
    run(
        'mut i = 0\n'
        'mut fns = []\n'
        'while (i < 3) {\n'
        '    mut captured = i * 10\n'
        '    mut fns = push(fns, fn() { return captured })\n'
        '    mut i = i + 1\n'
        '}\n'
        'print(fns[0](), " ", fns[1](), " ", fns[2]())'
    )
    assert output(capsys) == ['0 10 20']


def test_closure_keeps_and_mutates_defining_frame(capsys):
    run(
        'mut make_counter = fn() {\n'
        '    mut count = 0\n'
        '    return fn() {\n'
        '        mut count = count + 1\n'
        '        return count\n'
        '    }\n'
        '}\n'
        'mut c1 = make_counter()\n'
        'mut c2 = make_counter()\n'
        'c1()\n'
        'c1()\n'
        'print(c1(), " ", c2())'
    )
    assert output(capsys) == ['3 1']


def test_closures_share_captured_frame(capsys):
    run(
        'mut make_account = fn(balance) {\n'
        '    mut deposit = fn(n) { mut balance = balance + n }\n'
        '    mut read = fn() { return balance }\n'
        '    return {"deposit": deposit, "read": read}\n'
        '}\n'
        'mut acct = make_account(10)\n'
        'acct["deposit"](5)\n'
        'acct["deposit"](20)\n'
        'print(acct["read"]())'
    )
    assert output(capsys) == ['35']


def test_closures_are_lexical_not_dynamic(capsys):
    run(
        'mut x = "global"\n'
        'mut show = fn() { return x }\n'
        'mut caller = fn() {\n'
        '    mut y = "local"\n'
        '    return show()\n'
        '}\n'
        'print(caller())'
    )
    assert output(capsys) == ['global']


def test_parameters_are_fresh_locals(capsys):
    run(
        'mut n = 1\n'
        'mut f = fn(n) { mut n = n + 100\n return n }\n'
        'print(f(5), " ", n)'
    )
    assert output(capsys) == ['105 1']


def test_recursion(capsys):
    run(
        'mut fact = fn(n) {\n'
        '    if (n < 2) { return 1 }\n'
        '    return n * fact(n - 1)\n'
        '}\n'
        'print(fact(10))'
    )
    assert output(capsys) == ['3628800']


def test_return_without_value_and_missing_return_yield_unit(capsys):
    run(
        'mut a = fn() { return }\n'
        'mut b = fn() { mut x = 1 }\n'
        'print(a(), " ", b())'
    )
    assert output(capsys) == ['null null']


def test_return_exits_nested_loops(capsys):
    run(
        'mut find = fn(items, wanted) {\n'
        '    mut i = 0\n'
        '    while (i < len(items)) {\n'
        '        if (items[i] == wanted) { return i }\n'
        '        mut i = i + 1\n'
        '    }\n'
        '    return -1\n'
        '}\n'
        'print(find([4, 8, 15], 8), " ", find([4], 9))'
    )
    assert output(capsys) == ['1 -1']


def test_top_level_return_stops_the_script(capsys):
    run('print("before")\nreturn\nprint("after")')
    assert output(capsys) == ['before']


def test_equality_and_comparison(capsys):
    run(
        'print(1 == 1, " ", 1 == "1", " ", true == true, " ", "a" != "b")\n'
        'print("apple" < "banana", " ", 3 > 4, " ", [1, [2]] == [1, [2]])\n'
        'print({"a": 1} == {"a": 1}, " ", !false, " ", 1 == true)'
    )
    assert output(capsys) == [
        'true false true true',
        'true false true',
        'true true false',
    ]


def test_rendering(capsys):
    run(
        'print([1, "two", [true]], " ", {"k": [1]}, " ", fn(a, b) { return a }, " ", len)'
    )
    assert output(capsys) == ['[1, two, [true]] {k: [1]} fn(a, b) <builtin len>']


def test_dict_duplicate_key_overwrites_in_place(capsys):
    run('mut k = "a"\nmut d = {"a": 1, "b": 2, k: 3}\nprint(d, " ", d["a"], " ", d[k])')
    assert output(capsys) == ['{a: 3, b: 2} 3 3']


def test_list_concatenation_builds_a_new_list(capsys):
    run('mut a = [1]\nmut b = a + [2, 3]\nprint(a, " ", b)')
    assert output(capsys) == ['[1] [1, 2, 3]']


def test_string_indexing(capsys):
    run('mut s = "flux"\nprint(s[0], s[3], " ", len(s))')
    assert output(capsys) == ['fx 4']


@pytest.mark.parametrize('source, kind', [
    ('if (1) { print(1) }', 'TypeError'),
    ('while ("yes") { }', 'TypeError'),
    ('print(1 + true)', 'TypeError'),
    ('print("a" - "b")', 'TypeError'),
    ('print(1 < "2")', 'TypeError'),
    ('print(-"x")', 'TypeError'),
    ('print(!1)', 'TypeError'),
    ('mut x = 5\nx(1)', 'TypeError'),
    ('mut f = fn(a) { return a }\nf(1, 2)', 'TypeError'),
    ('len()', 'TypeError'),
    ('mut print = 1', 'TypeError'),
    ('mut f = fn(len) { return len }\nf(1)', 'TypeError'),
    ('print(5[0])', 'TypeError'),
    ('print({1: 2})', 'TypeError'),
    ('print([1, 2][2])', 'IndexError'),
    ('print([1, 2][-1])', 'IndexError'),
    ('print({"a": 1}["b"])', 'IndexError'),
    ('print(undefined_name)', 'NameError'),
    ('print(1 / 0)', 'ZeroDivisionError'),
])
def test_runtime_error_kinds(source, kind):
    assert error_of(source).name == kind


def test_error_inside_function_is_located_at_innermost_construct():
    err = error_of(
        'mut f = fn(x) {\n'
        '    return x + missing\n'
        '}\n'
        'f(1)'
    )
    assert err.name == 'NameError'
    assert (err.line, err.column) == (2, 16)


def test_builtin_errors_are_located_at_the_call():
    err = error_of('mut empty = []\n\nprint(first(empty))')
    assert err.name == 'IndexError'
    assert (err.line, err.column) == (3, 12)


def test_run_program_reports_file_name():
    with pytest.raises(FluxError) as excinfo:
        run_program('mut x = 1\nprint(x + nope)', filename='main.flux')
    assert str(excinfo.value) == 'NameError: undefined variable nope (at main.flux:2:11)'


def test_unbounded_recursion_is_a_flux_error():
    with pytest.raises(FluxError) as excinfo:
        run('mut loop = fn(n) { return loop(n + 1) }\nloop(0)')
    assert excinfo.value.kind == 'RecursionError'


def test_debug_trace_reports_declare_and_mutate(tmp_path):
    trace = tmp_path / 'trace.txt'
    interp = Interpreter(debug_level=2, debug_file=str(trace))
    interp.run(parse_program('mut x = 1\nif (true) { mut x = 2\n mut y = 3 }'))
    interp.close()
    lines = trace.read_text(encoding='utf-8').splitlines()
    assert lines == [
        'run <string>',
        'declare x: Int = 1',
        'mutate x: Int = 2',
        'declare y: Int = 3',
    ]
