"""Builders for MiniC AST documents and a one-call runner used across tests."""

import io
import os

from minic.config import InterpreterConfig
from minic.evaluator import Evaluator
from minic.loader import load_document

SAMPLES_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "samples")


# ---- Expressions ------------------------------------------------------------

def num(value):
    return {"kind": "IntegerLiteral", "value": value}


def char(value):
    return {"kind": "CharacterLiteral", "value": value}


def ref(name):
    return {"kind": "DeclRef", "name": name}


def binop(op, lhs, rhs):
    return {"kind": "BinaryOperator", "op": op, "lhs": lhs, "rhs": rhs}


def assign(lhs, rhs):
    return {"kind": "Assign", "lhs": lhs, "rhs": rhs}


def unary(op, operand):
    return {"kind": "UnaryOperator", "op": op, "operand": operand}


def deref(operand):
    return unary("*", operand)


def addr(operand):
    return unary("&", operand)


def paren(expr):
    return {"kind": "Paren", "expr": expr}


def index(base, i):
    return {"kind": "ArraySubscript", "base": base, "index": i}


def call(callee, *args):
    return {"kind": "Call", "callee": callee, "args": list(args)}


def PRINT(expr):
    return call("PRINT", expr)


# ---- Statements -------------------------------------------------------------

def var(name, type="int", init=None):
    item = {"kind": "VarDecl", "name": name, "type": type}
    if init is not None:
        item["init"] = init
    return item


def decl(name, type="int", init=None):
    return {"kind": "DeclStmt", "decls": [var(name, type, init)]}


def block(*stmts):
    return {"kind": "CompoundStmt", "body": list(stmts)}


def if_(cond, then, else_=None):
    item = {"kind": "IfStmt", "cond": cond, "then": then}
    if else_ is not None:
        item["else"] = else_
    return item


def while_(cond, body):
    return {"kind": "WhileStmt", "cond": cond, "body": body}


def for_(init, cond, inc, body):
    return {"kind": "ForStmt", "init": init, "cond": cond, "inc": inc, "body": body}


def ret(value=None):
    item = {"kind": "ReturnStmt"}
    if value is not None:
        item["value"] = value
    return item


# ---- Declarations -----------------------------------------------------------

def func(name, params=(), body=None):
    """``params`` holds names (typed int) or ``(name, type)`` pairs."""
    item = {
        "kind": "FunctionDecl",
        "name": name,
        "params": [
            {"name": p, "type": "int"} if isinstance(p, str) else {"name": p[0], "type": p[1]}
            for p in params
        ],
    }
    if body is not None:
        item["body"] = body
    return item


def main(*stmts):
    return func("main", body=block(*stmts))


def program(*decls):
    return {"decls": list(decls)}


# ---- Running ----------------------------------------------------------------

def make_evaluator(stdin="", **config):
    return Evaluator(
        InterpreterConfig(**config),
        stdin=io.StringIO(stdin),
        stdout=io.StringIO(),
        stderr=io.StringIO(),
    )


def run(doc, stdin="", **config):
    """Run ``doc`` and return (evaluator, printed integers, main's value)."""
    evaluator = make_evaluator(stdin, **config)
    result = evaluator.run(load_document(doc))
    return evaluator, printed(evaluator), result


def printed(evaluator):
    return [int(tok) for tok in evaluator.stdout.getvalue().split()]
