"""Program entry tests: environments, streams and exit status."""

import io

from pylox import Environment, make_stdlib, run

PROGRAM = """
var total = 0;
for (var i = 1; i <= 4; i = i + 1) total = total + i * 1.5;
class Acc { add(n) { this.sum = this.sum + n; return this; } }
var acc = Acc();
acc.sum = 0;
print acc.add(total).add(2).sum;
print "total: " + total;
"""


def run_capture(source: str, env: Environment) -> tuple[int, str, str]:
    out = io.StringIO()
    err = io.StringIO()
    code = run(source, env, stdout=out, stderr=err)
    return code, out.getvalue(), err.getvalue()


def test_fresh_environments_give_identical_results():
    first = run_capture(PROGRAM, Environment(make_stdlib()))
    second = run_capture(PROGRAM, Environment(make_stdlib()))
    assert first == (0, "17\ntotal: 15\n", "")
    assert second == first


def test_shared_environment_carries_state():
    env = Environment(make_stdlib())
    assert run_capture("var n = 1;", env) == (0, "", "")
    assert run_capture("n = n + 1;", env) == (0, "", "")
    assert run_capture("print n;", env) == (0, "2\n", "")
    fresh = run_capture("print n;", Environment(make_stdlib()))
    assert fresh[0] == 72
    assert "Undefined variable 'n'." in fresh[2]


def test_runtime_error_still_merges_block_writes():
    env = Environment(make_stdlib())
    run_capture("var x = 1;", env)
    assert run_capture("{ x = 2; { x = 3; nosuch; } }", env)[0] == 72
    assert run_capture("print x;", env) == (0, "3\n", "")


def test_parse_errors_leave_environment_untouched():
    env = Environment(make_stdlib())
    code, out, err = run_capture("var a = 1;\nprint a", env)
    assert code == 67
    assert out == ""
    assert "a" not in env.globals
