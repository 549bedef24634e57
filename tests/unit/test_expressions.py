"""Expression semantics: arithmetic, pointers, memory access and assignment."""

import logging

import pytest

from minic import minic_ast as ast
from minic.errors import DivisionByZeroError, UnsupportedOperationError
from minic.heap import HEAP_BASE
from minic.loader import load_document
from minic.values import INT64_MAX, INT64_MIN

from helpers import (
	PRINT, addr, assign, binop, call, char, decl, deref, index, main, make_evaluator, num,
	paren, printed, program, ref, run, unary,
)


def _prints(*exprs, setup=()):
	_, out, _ = run(program(main(*setup, *[PRINT(e) for e in exprs])))
	return out


def test_literals_and_unary_operators():
	assert _prints(num(42), char("A"), unary("-", num(5)), unary("+", num(5))) == [42, 65, -5, 5]


def test_arithmetic_and_relational_operators():
	assert _prints(
		binop("+", num(2), num(3)),
		binop("-", num(2), num(3)),
		binop("*", num(4), num(-3)),
		binop("<", num(1), num(2)),
		binop(">", num(1), num(2)),
		binop("==", num(7), num(7)),
	) == [5, -1, -12, 1, 0, 1]


def test_arithmetic_wraps_at_64_bits():
	assert _prints(binop("+", num(INT64_MAX), num(1))) == [INT64_MIN]


def test_operands_evaluate_left_to_right():
	# (x = 2) * (x + 1)
	out = _prints(
		binop("*", paren(assign(ref("x"), num(2))), paren(binop("+", ref("x"), num(1)))),
		ref("x"),
		setup=[decl("x", "int", num(10))],
	)
	assert out == [6, 2]


def test_assignment_yields_assigned_value():
	out = _prints(
		assign(ref("x"), assign(ref("y"), num(3))),
		ref("x"),
		ref("y"),
		setup=[decl("x"), decl("y")],
	)
	assert out == [3, 3, 3]


def test_exact_division():
	assert _prints(binop("/", num(12), num(4)), binop("/", num(-12), num(4))) == [3, -3]


def test_inexact_division_warns_and_truncates(caplog):
	doc = program(main(PRINT(binop("/", num(7), num(2))), PRINT(binop("/", num(-7), num(2)))))
	with caplog.at_level(logging.WARNING, logger="minic.evaluator.expressions"):
		evaluator, out, _ = run(doc)

	assert out == [3, -3]
	assert len(evaluator.diagnostics) == 2
	assert evaluator.summary['warnings'] == 2
	assert "not exact" in caplog.text


def test_division_by_zero_is_fatal_before_printing():
	doc = program(main(decl("v", "int", call("GET")), PRINT(binop("/", ref("v"), num(0)))))
	evaluator = make_evaluator("9\n")
	with pytest.raises(DivisionByZeroError) as info:
		evaluator.run(load_document(doc))

	assert printed(evaluator) == []
	assert info.value.stack_trace == ["  at main"]
	assert evaluator.env.depth == 1


def test_sizeof_is_one_slot():
	out = _prints(
		{"kind": "SizeOf", "type": "int"},
		{"kind": "SizeOf", "type": "char*"},
		{"kind": "SizeOf", "expr": ref("c")},
		setup=[decl("c", "char", char("z"))],
	)
	assert out == [8, 8, 8]


def test_casts_pass_values_through():
	out = _prints(
		{"kind": "Cast", "type": "char", "expr": num(300)},
		{"kind": "ImplicitCast", "expr": char("a")},
		{"kind": "Cast", "type": "int*", "expr": num(16)},
	)
	assert out == [300, 97, 16]


def test_array_round_trip():
	setup = [
		decl("a", "int[5]"),
		decl("i", "int", num(0)),
		{"kind": "WhileStmt", "cond": binop("<", ref("i"), num(5)), "body": {"kind": "CompoundStmt", "body": [
			assign(index(ref("a"), ref("i")), binop("*", ref("i"), num(2))),
			assign(ref("i"), binop("+", ref("i"), num(1))),
		]}},
	]
	assert _prints(index(ref("a"), num(3)), index(ref("a"), num(0)), setup=setup) == [6, 0]


def test_pointer_arithmetic_matches_subscript():
	setup = [
		decl("a", "int[4]"),
		assign(index(ref("a"), num(2)), num(77)),
		decl("p", "int*", addr(index(ref("a"), num(0)))),
		decl("q", "int*", addr(index(ref("a"), num(3)))),
	]
	out = _prints(
		deref(paren(binop("+", ref("p"), num(2)))),
		index(ref("a"), num(2)),
		deref(paren(binop("+", num(2), ref("p")))),
		deref(paren(binop("-", ref("q"), num(1)))),
		binop("-", ref("q"), ref("p")),
		index(ref("p"), num(2)),
		setup=setup,
	)
	assert out == [77, 77, 77, 77, 3, 77]


def test_array_name_decays_to_its_base_address():
	setup = [decl("a", "int[2]"), assign(index(ref("a"), num(1)), num(5))]
	out = _prints(
		binop("==", ref("a"), addr(index(ref("a"), num(0)))),
		binop("==", addr(ref("a")), ref("a")),
		deref(paren(binop("+", ref("a"), num(1)))),
		setup=setup,
	)
	assert out == [1, 1, 5]


def test_assignment_through_dereference():
	setup = [
		decl("a", "int[3]"),
		decl("p", "int*", addr(index(ref("a"), num(1)))),
		assign(deref(ref("p")), num(12)),
		assign(deref(paren(binop("+", ref("p"), num(1)))), num(13)),
	]
	assert _prints(index(ref("a"), num(1)), index(ref("a"), num(2)), setup=setup) == [12, 13]


def test_address_of_via_dereference_is_identity():
	setup = [decl("p", "int*", call("MALLOC", num(16)))]
	assert _prints(binop("==", addr(deref(ref("p"))), ref("p")), setup=setup) == [1]


def test_unsupported_assignment_target():
	with pytest.raises(UnsupportedOperationError):
		run(program(main(assign(num(1), num(2)))))


def test_address_of_scalar_is_unsupported():
	with pytest.raises(UnsupportedOperationError):
		run(program(main(decl("x"), PRINT(addr(ref("x"))))))


def test_expression_values_are_memoized_in_the_active_frame():
	unit = load_document(program(main(decl("x", "int", binop("+", num(1), num(2))))))
	evaluator = make_evaluator()
	evaluator.initialize(unit)
	evaluator.env.push_frame(evaluator.env.get_entry())

	body = evaluator.env.get_entry().body
	evaluator.eval_node(body)

	init = body.statements[0].decls[0].init
	assert isinstance(init, ast.BinaryOperator)
	assert evaluator.env.top.get_stmt_val(init) == 3
	assert evaluator.env.top.get_stmt_val(init.left) == 1


def test_typed_call_result_takes_part_in_pointer_arithmetic():
	typed = dict(call("MALLOC", num(16)), type="int*")
	assert _prints(binop("+", typed, num(1))) == [HEAP_BASE + 8]
	assert _prints(binop("+", call("MALLOC", num(16)), num(1))) == [HEAP_BASE + 1]
