"""Calls, frames and the four builtins."""

import io
import sys

import pytest

from minic import minic_ast as ast
from minic.config import InterpreterConfig
from minic.errors import (
	InputError, MissingEntryPointError, StackOverflowError, UnboundVariableError,
	UndefinedFunctionError, UnsupportedOperationError,
)
from minic.evaluator import Evaluator, evaluate
from minic.loader import load_document

from helpers import (
	PRINT, assign, binop, block, call, decl, func, if_, index, main, make_evaluator, num,
	printed, program, ref, ret, run, var,
)


FACT = func("fact", ["n"], block(
	if_(binop("<", ref("n"), num(2)), ret(num(1))),
	ret(binop("*", ref("n"), call("fact", binop("-", ref("n"), num(1))))),
))


def test_recursive_factorial_and_stack_depth():
	evaluator, out, _ = run(program(FACT, main(PRINT(call("fact", num(5))))))
	assert out == [120]
	# global + main + fact(5..1)
	assert evaluator.env.max_depth == 7
	assert evaluator.summary['max_depth'] == 7
	assert evaluator.env.depth == 1
	assert evaluator.summary['calls'] == 6


def test_parameters_are_bound_by_value():
	bump = func("bump", ["x"], block(assign(ref("x"), binop("+", ref("x"), num(1))), ret(ref("x"))))
	_, out, _ = run(program(bump, main(
		decl("x", "int", num(5)),
		PRINT(call("bump", ref("x"))),
		PRINT(ref("x")),
	)))
	assert out == [6, 5]


def test_locals_are_isolated_between_caller_and_callee():
	inner = func("inner", body=block(decl("x", "int", num(99)), PRINT(ref("x")), ret(num(0))))
	_, out, _ = run(program(inner, main(decl("x", "int", num(1)), call("inner"), PRINT(ref("x")))))
	assert out == [99, 1]


def test_arguments_evaluate_left_to_right_in_caller_frame():
	pair = func("pair", ["a", "b"], block(PRINT(ref("a")), PRINT(ref("b"))))
	_, out, _ = run(program(pair, main(
		decl("i", "int", num(0)),
		call("pair", assign(ref("i"), num(1)), binop("+", ref("i"), num(10))),
	)))
	assert out == [1, 11]


def test_functions_see_and_update_globals():
	_, out, _ = run(program(
		var("counter", "int", num(5)),
		var("table", "int[3]"),
		func("tick", body=block(
			assign(ref("counter"), binop("+", ref("counter"), num(1))),
			assign(index(ref("table"), num(1)), ref("counter")),
		)),
		main(call("tick"), call("tick"), PRINT(ref("counter")), PRINT(index(ref("table"), num(1)))),
	))
	assert out == [7, 7]


def test_global_initializer_may_call_a_function():
	_, out, _ = run(program(
		func("seven", body=block(ret(num(7)))),
		var("g", "int", call("seven")),
		main(PRINT(ref("g"))),
	))
	assert out == [7]


def test_function_falling_off_the_end_returns_zero():
	_, out, _ = run(program(func("noop", body=block()), main(PRINT(call("noop")))))
	assert out == [0]


def test_call_to_undefined_function():
	with pytest.raises(UndefinedFunctionError):
		run(program(func("helper", ["x"]), main(call("helper", num(1)))))


def test_unbounded_recursion_overflows_and_unwinds():
	forever = func("forever", body=block(ret(call("forever"))))
	evaluator = make_evaluator(max_call_depth=50)
	with pytest.raises(StackOverflowError) as info:
		evaluator.run(load_document(program(forever, main(call("forever")))))
	assert evaluator.env.depth == 1
	assert info.value.stack_trace[-1] == "  at forever"


def test_missing_main():
	with pytest.raises(MissingEntryPointError):
		run(program(func("helper", body=block())))


def test_unbound_variable_is_fatal():
	ghost = ast.VarDecl("ghost")
	entry = ast.FunctionDecl("main", body=ast.CompoundStmt([ast.ReturnStmt(ast.DeclRef(ghost))]))
	with pytest.raises(UnboundVariableError):
		evaluate(ast.TranslationUnit([entry]), stdout=io.StringIO())


# ---- Builtins -----------------------------------------------------------------

def test_get_reads_whitespace_separated_integers():
	_, out, _ = run(program(main(
		PRINT(call("GET")), PRINT(call("GET")), PRINT(call("GET")),
	)), stdin="3 -4\n\n5\n")
	assert out == [3, -4, 5]


def test_get_at_end_of_input():
	with pytest.raises(InputError):
		run(program(main(PRINT(call("GET")))), stdin="")


def test_get_rejects_non_integers():
	with pytest.raises(InputError):
		run(program(main(PRINT(call("GET")))), stdin="abc\n")


def test_get_prompt_goes_to_stderr():
	evaluator = make_evaluator("1\n", show_prompt=True, input_prompt="> ")
	evaluator.run(load_document(program(main(PRINT(call("GET"))))))
	assert evaluator.stderr.getvalue() == "> "
	assert printed(evaluator) == [1]


def test_print_separator():
	evaluator = make_evaluator(print_separator=",")
	evaluator.run(load_document(program(main(PRINT(num(1)), PRINT(num(2))))))
	assert evaluator.stdout.getvalue() == "1,2,"


def test_builtins_do_not_push_frames():
	evaluator, _, _ = run(program(main(PRINT(num(1)))))
	assert evaluator.env.max_depth == 2
	assert evaluator.summary['builtin_calls'] == 1
	assert evaluator.summary['calls'] == 1


def test_malloc_write_free():
	evaluator, out, _ = run(program(main(
		decl("p", "int*", call("MALLOC", num(80))),
		assign(index(ref("p"), num(0)), num(7)),
		assign(index(ref("p"), num(9)), num(9)),
		PRINT(index(ref("p"), num(9))),
		call("FREE", ref("p")),
		PRINT(index(ref("p"), num(0))),
		call("FREE", ref("p")),
		call("FREE", num(12345)),
	)))
	assert out[0] == 9
	# Freed memory is stale, not a fresh zeroed block
	assert out[1] == 7
	assert evaluator.heap.live_blocks == {}


def test_builtin_arity_is_checked():
	with pytest.raises(UnsupportedOperationError):
		run(program(main(call("PRINT"))))


def test_evaluate_entry_point_returns_main_value():
	unit = load_document(program(main(ret(num(3)))))
	assert evaluate(unit, InterpreterConfig(), stdout=io.StringIO()) == 3


def test_evaluator_defaults_to_process_streams():
	evaluator = Evaluator()
	assert evaluator.stdin is sys.stdin
	assert evaluator.stdout is sys.stdout
