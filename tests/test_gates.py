"""Gate constraints vanish on honestly computed rows.

Each test computes a row the way a witness generator would and checks that
every constraint of the gate evaluates to zero, which pins the row layout
each gate reads.
"""

import random

import pytest

from circuits.argument import ArgumentType
from circuits.column import COLUMNS, Column, Variable
from circuits.gate import CurrOrNext, GateType
from constraints import (
    GATE_ARGUMENTS,
    MAX_GATE_CONSTRAINTS,
    ChaCha0,
    ChaCha1,
    ChaCha2,
    ChaChaFinal,
    CompleteAdd,
    EndomulScalar,
    EndosclMul,
    ForeignFieldAdd,
    Generic,
    Poseidon,
    RangeCheck0,
    RangeCheck1,
    VarbaseMul,
    Xor16,
    get_argument,
)
from constraints.poseidon import STATE_ORDER
from expr.ast import columns, evaluate
from expr.environment import Environment
from primitives.field import FF, to_ff
from protocol.alphas import Alphas


def _ff(v):
    return v if isinstance(v, FF) else to_ff(v)


def row_env(constants, curr, nxt=(), coeffs=()) -> Environment:
    """Environment holding one row and the first cells of the next row.

    Cells not given are zero.
    """
    def padded(values):
        values = list(values)
        return values + [0] * (COLUMNS - len(values))

    cells = {}
    for i, v in enumerate(padded(curr)):
        cells[Variable(Column.witness(i), CurrOrNext.CURR)] = _ff(v)
    for i, v in enumerate(padded(nxt)):
        cells[Variable(Column.witness(i), CurrOrNext.NEXT)] = _ff(v)
    for i, v in enumerate(padded(coeffs)):
        cells[Variable(Column.coefficient(i), CurrOrNext.CURR)] = _ff(v)
    return Environment(constants=constants, cells=cells, domain_size=16, zeta=FF(5))


def assert_satisfied(argument, env) -> None:
    for i, c in enumerate(argument.constraint_checks()):
        assert evaluate(c, env) == FF(0), f"{argument.__name__} constraint {i} does not vanish"


def limbs(value: int, bits: int, count: int) -> list[int]:
    mask = (1 << bits) - 1
    return [(value >> (bits * i)) & mask for i in range(count)]


class TestRegistry:
    """Tests for the provider registry."""

    @pytest.mark.parametrize("gate", sorted(GATE_ARGUMENTS))
    def test_declared_count_matches(self, gate) -> None:
        argument = GATE_ARGUMENTS[gate]
        assert argument.ARGUMENT_TYPE == ArgumentType.of_gate(gate)
        assert len(argument.constraint_checks()) == argument.constraint_count()

    @pytest.mark.parametrize("gate", sorted(GATE_ARGUMENTS))
    def test_combined_is_guarded_by_selector(self, gate) -> None:
        alphas = Alphas()
        alphas.register(ArgumentType.of_gate(GateType.ZERO), MAX_GATE_CONSTRAINTS)
        combined = get_argument(gate).combined_constraints(alphas)
        assert Column.index_of(gate) in columns(combined)

    def test_max_gate_constraints(self) -> None:
        assert MAX_GATE_CONSTRAINTS == VarbaseMul.CONSTRAINTS == 21

    @pytest.mark.parametrize("gate", [GateType.ZERO, GateType.LOOKUP])
    def test_gates_without_constraints(self, gate) -> None:
        with pytest.raises(KeyError):
            get_argument(gate)


def test_combined_weights_constraints(constants) -> None:
    """Selector times sum of alpha^e_i * C_i over the gate range."""
    alphas = Alphas()
    alphas.register(ArgumentType.of_gate(GateType.ZERO), MAX_GATE_CONSTRAINTS)
    env = row_env(constants, curr=[3, 5, 7, 11, 13, 17], coeffs=range(1, 11))
    env.cells[Variable(Column.index_of(GateType.GENERIC), CurrOrNext.CURR)] = FF(2)

    checks = [evaluate(c, env) for c in Generic.constraint_checks()]
    alpha = constants.alpha
    expected = FF(2) * (checks[0] + alpha * checks[1])
    assert evaluate(Generic.combined_constraints(alphas), env) == expected


def test_generic(constants) -> None:
    # Left half: 3 * 4 = 12, right half: 5 + 6 = 11
    env = row_env(
        constants,
        curr=[3, 4, 12, 5, 6, 11],
        coeffs=[0, 0, -1, 1, 0, 1, 1, -1, 0, 0],
    )
    assert_satisfied(Generic, env)


def test_poseidon(constants) -> None:
    rng = random.Random(1)
    mds = constants.mds
    round_constants = [rng.randrange(1 << 60) for _ in range(15)]

    states = [[FF(rng.randrange(1 << 60)) for _ in range(3)]]
    for r in range(5):
        sbox = [x ** 7 for x in states[r]]
        states.append([
            FF(mds[j][0]) * sbox[0] + FF(mds[j][1]) * sbox[1] + FF(mds[j][2]) * sbox[2]
            + FF(round_constants[3 * r + j])
            for j in range(3)
        ])

    curr = [FF(0)] * COLUMNS
    for r in range(5):
        start = 3 * STATE_ORDER[r]
        curr[start:start + 3] = states[r]
    env = row_env(constants, curr=curr, nxt=states[5], coeffs=round_constants)
    assert_satisfied(Poseidon, env)


def test_poseidon_rejects_wrong_output(constants) -> None:
    env = row_env(constants, curr=[1] * COLUMNS, nxt=[1, 2, 3])
    values = [evaluate(c, env) for c in Poseidon.constraint_checks()]
    assert any(v != FF(0) for v in values)


def test_complete_add_distinct_points(constants) -> None:
    x1, y1, x2, y2 = FF(11), FF(22), FF(35), FF(41)
    s = (y2 - y1) / (x2 - x1)
    x3 = s * s - x1 - x2
    y3 = s * (x1 - x3) - y1
    x21_inv = FF(1) / (x2 - x1)
    # inf = 0, same_x = 0, inf_z = 0
    env = row_env(constants, curr=[x1, y1, x2, y2, x3, y3, 0, 0, s, 0, x21_inv])
    assert_satisfied(CompleteAdd, env)


def test_complete_add_doubling(constants) -> None:
    x1, y1 = FF(9), FF(4)
    s = FF(3) * x1 * x1 / (FF(2) * y1)
    x3 = s * s - x1 - x1
    y3 = s * (x1 - x3) - y1
    env = row_env(constants, curr=[x1, y1, x1, y1, x3, y3, 0, 1, s, 0, 0])
    assert_satisfied(CompleteAdd, env)


def test_varbase_mul(constants) -> None:
    xt, yt = FF(1234), FF(5678)
    x, y = FF(91011), FF(121314)
    bits = [1, 0, 1, 1, 0]
    n = 77

    points = [(x, y)]
    slopes = []
    for b in bits:
        xi, yi = points[-1]
        s = (yi - to_ff(2 * b - 1) * yt) / (xi - xt)
        xr = s * s - xi - xt
        d = xi - xr
        t = FF(2) * yi - s * d
        x_next = (t / d) ** 2 - xr - xi
        y_next = (xi - x_next) * t / d - yi
        points.append((x_next, y_next))
        slopes.append(s)

    n_next = 32 * n + sum(2 ** (4 - i) * b for i, b in enumerate(bits))
    curr = [xt, yt, points[0][0], points[0][1], n, n_next, 0]
    for px, py in points[1:5]:
        curr += [px, py]
    nxt = [points[5][0], points[5][1]] + bits + slopes
    env = row_env(constants, curr=curr, nxt=nxt)
    assert_satisfied(VarbaseMul, env)


def _endo_step(constants, bx, by, xt, yt, xp, yp):
    """Point R satisfying one EndosclMul step from P with bits (bx, by)."""
    endo = constants.endo_coefficient
    xq = (FF(1) + (endo - FF(1)) * FF(bx)) * xt
    yq = to_ff(2 * by - 1) * yt
    s = (yq - yp) / (xq - xp)
    u = FF(2) * xp - s * s + xq
    d = s * s - xq + xp - (FF(2) * yp / u - s) ** 2
    xr = xp - d
    yr = FF(2) * d * yp / u - d * s - yp
    return s, xr, yr


def test_endoscl_mul(constants) -> None:
    xt, yt = FF(31), FF(47)
    xp, yp = FF(1001), FF(2002)
    b1, b2, b3, b4 = 1, 0, 0, 1
    n = 5

    s1, xr, yr = _endo_step(constants, b1, b2, xt, yt, xp, yp)
    s3, xs, ys = _endo_step(constants, b3, b4, xt, yt, xr, yr)
    n_next = 16 * n + 8 * b1 + 4 * b2 + 2 * b3 + b4

    curr = [xt, yt, 0, 0, xp, yp, n, xr, yr, s1, s3, b1, b2, b3, b4]
    nxt = [0, 0, 0, 0, xs, ys, n_next]
    env = row_env(constants, curr=curr, nxt=nxt)
    assert_satisfied(EndosclMul, env)


def test_endomul_scalar(constants) -> None:
    a_of = [0, 0, -1, 1]
    b_of = [-1, 1, 0, 0]
    crumbs = [3, 1, 0, 2, 2, 1, 3, 0]
    n0, a0, b0 = 12345, 6, -4

    n8 = n0 * 4 ** 8 + sum(4 ** (7 - i) * x for i, x in enumerate(crumbs))
    a8 = 2 ** 8 * a0 + sum(2 ** (7 - i) * a_of[x] for i, x in enumerate(crumbs))
    b8 = 2 ** 8 * b0 + sum(2 ** (7 - i) * b_of[x] for i, x in enumerate(crumbs))
    env = row_env(constants, curr=[n0, n8, a0, b0, a8, b8] + crumbs)
    assert_satisfied(EndomulScalar, env)


@pytest.mark.parametrize("gate, rotation", [(ChaCha0, 16), (ChaCha1, 12), (ChaCha2, 8)])
def test_chacha_quarter_lines(constants, gate, rotation) -> None:
    a_in, b_in, d_in = 0xFFFFFFFF, 0x00000002, 0x0F0F1234
    total = a_in + b_in
    a_out, carry = total & 0xFFFFFFFF, total >> 32
    d_xor = d_in ^ a_out
    hi, lo = d_xor >> (32 - rotation), d_xor & ((1 << (32 - rotation)) - 1)
    d_out = ((d_xor << rotation) | hi) & 0xFFFFFFFF

    env = row_env(
        constants,
        curr=[a_in, b_in, d_in, a_out, d_xor, d_out, carry, lo, hi],
        nxt=limbs(a_out, 4, 8),
    )
    assert_satisfied(gate, env)


def test_chacha_final(constants) -> None:
    words = [0x01234567, 0x89ABCDEF, 0xDEADBEEF, 0x00C0FFEE]
    curr, nxt = [], []
    for x in words:
        hi, lo = x >> 25, x & ((1 << 25) - 1)
        curr += [x, lo, hi]
        nxt.append(((x << 7) | hi) & 0xFFFFFFFF)
    env = row_env(constants, curr=curr, nxt=nxt)
    assert_satisfied(ChaChaFinal, env)


def test_range_check0(constants) -> None:
    v0 = random.Random(2).randrange(1 << 88)
    crumbs = limbs(v0, 2, 8)
    high = limbs(v0 >> 16, 12, 6)
    env = row_env(constants, curr=[v0] + high + crumbs)
    assert_satisfied(RangeCheck0, env)


def test_range_check0_rejects_wide_value(constants) -> None:
    v0 = 1 << 88
    env = row_env(constants, curr=[v0] + limbs(v0 >> 16, 12, 6) + limbs(v0, 2, 8))
    values = [evaluate(c, env) for c in RangeCheck0.constraint_checks()]
    assert values[-1] != FF(0)


def test_range_check1(constants) -> None:
    v2 = random.Random(3).randrange(1 << 92)
    crumbs = limbs(v2, 2, 10)
    middle = limbs(v2 >> 20, 12, 4)
    top = limbs(v2 >> 68, 12, 2)
    env = row_env(constants, curr=[v2] + middle + crumbs, nxt=top)
    assert_satisfied(RangeCheck1, env)


@pytest.mark.parametrize("seed", [4, 5, 6])
def test_foreign_field_add(constants, seed) -> None:
    rng = random.Random(seed)
    f = (1 << 255) - 19
    a, b = rng.randrange(f), rng.randrange(f)
    ov = 1 if a + b >= f else 0
    r = a + b - ov * f

    a_l, b_l, f_l, r_l = (limbs(v, 88, 3) for v in (a, b, f, r))
    low_mid = (
        (a_l[0] + (b_l[0] - ov * f_l[0] - r_l[0]))
        + 2 ** 88 * (a_l[1] + b_l[1] - ov * f_l[1] - r_l[1])
    )
    assert low_mid % 2 ** 176 == 0
    carry = low_mid >> 176

    env = row_env(
        constants,
        curr=a_l + b_l + [ov, carry],
        nxt=r_l,
        coeffs=f_l + [1],
    )
    assert_satisfied(ForeignFieldAdd, env)


def test_xor16(constants) -> None:
    in1, in2 = 0x3_A5C3, 0x7_0FF0
    out = in1 ^ in2
    curr = [in1, in2, out]
    for v in (in1, in2, out):
        curr += limbs(v, 4, 4)
    env = row_env(constants, curr=curr, nxt=[in1 >> 16, in2 >> 16, out >> 16])
    assert_satisfied(Xor16, env)
