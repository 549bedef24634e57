"""
MiniC AST documents: JSON produced by a front end.

Decodes a document into ``minic_ast`` nodes, resolving every name to its
declaration node and filling in the static types the document leaves out.

Document shape
==============

::

    {"decls": [
        {"kind": "FunctionDecl", "name": "PRINT", "params": [{"name": "x", "type": "int"}]},
        {"kind": "VarDecl", "name": "limit", "type": "int",
         "init": {"kind": "IntegerLiteral", "value": 10}},
        {"kind": "FunctionDecl", "name": "main", "params": [],
         "body": {"kind": "CompoundStmt", "body": [...]}}
    ]}

Type strings are ``int`` or ``char`` followed by any number of ``*`` and an
optional ``[N]`` suffix (``int*``, ``int[5]``, ``char*[3]``).

Usage
-----
::

    from minic.loader import load_program, loads

    unit = load_program("factorial.json")
    unit = loads('{"decls": [...]}')
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Optional

from . import minic_ast as ast
from .environment import Builtin
from .errors import LoadError

_TYPE_RE = re.compile(r"^\s*(int|char)\s*(\**)\s*(?:\[\s*(\d+)\s*\])?\s*$")

_BINARY_OPS = {"+", "-", "*", "/", "<", ">", "=="}
_UNARY_OPS = {"-", "+", "*", "&"}
_RETYPABLE = (
    ast.IntegerLiteral, ast.CharacterLiteral, ast.UnaryOperator,
    ast.ImplicitCast, ast.ArraySubscript, ast.BinaryOperator, ast.CallExpression,
)


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------

def parse_type(text: str) -> ast.CType:
    """Parse a type string such as ``int``, ``char**`` or ``int[5]``."""
    if not isinstance(text, str):
        raise LoadError(f"Type must be a string, got {text!r}")
    m = _TYPE_RE.match(text)
    if not m:
        raise LoadError(f"Invalid type: {text!r}")
    base, stars, length = m.groups()
    ctype = ast.INT_TYPE if base == "int" else ast.CHAR_TYPE
    for _ in stars:
        ctype = ast.pointer_to(ctype)
    if length is not None:
        ctype = ast.array_of(ctype, int(length))
    return ctype


# ---------------------------------------------------------------------------
# Scopes
# ---------------------------------------------------------------------------

class _Scope:
    __slots__ = ("names", "outer")

    def __init__(self, outer: Optional["_Scope"] = None):
        self.names: Dict[str, ast.VarDecl] = {}
        self.outer = outer

    def define(self, decl: ast.VarDecl):
        self.names[decl.name] = decl

    def resolve(self, name: str) -> Optional[ast.VarDecl]:
        scope = self
        while scope is not None:
            if name in scope.names:
                return scope.names[name]
            scope = scope.outer
        return None


# ---------------------------------------------------------------------------
# Decoder
# ---------------------------------------------------------------------------

class _Decoder:
    def __init__(self):
        self.functions: Dict[str, ast.FunctionDecl] = {}
        self.globals = _Scope()
        self.scope = self.globals
        self.unit = ast.TranslationUnit()

    # ---- Top level ----------------------------------------------------------

    def decode_unit(self, doc: Any) -> ast.TranslationUnit:
        if not isinstance(doc, dict) or not isinstance(doc.get("decls"), list):
            raise LoadError("Document must be an object with a 'decls' list")

        # Declare every function first so calls may refer forward
        for item in doc["decls"]:
            if _kind(item) == "FunctionDecl":
                self._declare_function(item)

        for item in doc["decls"]:
            kind = _kind(item)
            if kind == "FunctionDecl":
                self._define_function(item)
            elif kind == "VarDecl":
                decl = self._var_decl(item)
                self.unit.decls.append(decl)
            else:
                raise LoadError(f"Unexpected top-level kind: {kind!r}")
        return self.unit

    def _declare_function(self, item: Dict[str, Any]):
        name = _require(item, "name", str)
        if name in self.functions:
            return
        return_type = parse_type(item.get("return_type", "int"))
        fdecl = ast.FunctionDecl(name, return_type=return_type)
        self.functions[name] = fdecl
        self.unit.decls.append(fdecl)

    def _define_function(self, item: Dict[str, Any]):
        fdecl = self.functions[item["name"]]
        if "body" not in item or item["body"] is None:
            if not fdecl.params:
                fdecl.params = [self._param(p) for p in _list(item, "params")]
            return
        if fdecl.is_definition():
            raise LoadError(f"Function '{fdecl.name}' defined twice")

        fdecl.params = [self._param(p) for p in _list(item, "params")]
        outer = self.scope
        self.scope = _Scope(self.globals)
        try:
            for param in fdecl.params:
                self.scope.define(param)
            fdecl.body = self.statement(item["body"])
        finally:
            self.scope = outer

    def _param(self, item: Dict[str, Any]) -> ast.VarDecl:
        return ast.VarDecl(_require(item, "name", str), parse_type(item.get("type", "int")))

    def _var_decl(self, item: Dict[str, Any]) -> ast.VarDecl:
        name = _require(item, "name", str)
        init = item.get("init")
        decl = ast.VarDecl(name, parse_type(item.get("type", "int")))
        # The initializer cannot see the variable it initializes
        if init is not None:
            decl.init = self.expression(init)
        self.scope.define(decl)
        return decl

    def _function(self, name: str) -> ast.FunctionDecl:
        fdecl = self.functions.get(name)
        if fdecl is None:
            try:
                Builtin(name)
            except ValueError:
                raise LoadError(f"Call to undeclared function '{name}'") from None
            # Implicit prototype for a builtin
            fdecl = ast.FunctionDecl(name, [ast.VarDecl("value")])
            self.functions[name] = fdecl
            self.unit.decls.insert(0, fdecl)
        return fdecl

    # ---- Statements ---------------------------------------------------------

    def statement(self, item: Any) -> ast.Statement:
        kind = _kind(item)

        if kind == "CompoundStmt":
            outer = self.scope
            self.scope = _Scope(outer)
            try:
                return ast.CompoundStmt([self.statement(s) for s in _list(item, "body")])
            finally:
                self.scope = outer
        elif kind == "DeclStmt":
            return ast.DeclStmt([self._var_decl(d) for d in _require(item, "decls", list)])
        elif kind == "ExprStmt":
            return ast.ExpressionStatement(self.expression(_require(item, "expr")))
        elif kind == "IfStmt":
            return ast.IfStmt(
                self.expression(_require(item, "cond")),
                self.statement(_require(item, "then")),
                self._optional_statement(item.get("else")),
            )
        elif kind == "WhileStmt":
            return ast.WhileStmt(
                self.expression(_require(item, "cond")),
                self.statement(_require(item, "body")),
            )
        elif kind == "ForStmt":
            outer = self.scope
            self.scope = _Scope(outer)
            try:
                return ast.ForStmt(
                    self._optional_statement(item.get("init")),
                    self._optional_expression(item.get("cond")),
                    self._optional_expression(item.get("inc")),
                    self.statement(_require(item, "body")),
                )
            finally:
                self.scope = outer
        elif kind == "ReturnStmt":
            return ast.ReturnStmt(self._optional_expression(item.get("value")))
        elif kind == "NullStmt":
            return ast.NullStmt()

        # Any expression may stand as a statement
        return ast.ExpressionStatement(self.expression(item))

    def _optional_statement(self, item: Any) -> Optional[ast.Statement]:
        return None if item is None else self.statement(item)

    # ---- Expressions --------------------------------------------------------

    def _optional_expression(self, item: Any) -> Optional[ast.Expression]:
        return None if item is None else self.expression(item)

    def expression(self, item: Any) -> ast.Expression:
        node = self._expression(item)
        # An explicit type wins over the inferred one where the kind carries its own
        if "type" in item and type(node) in _RETYPABLE:
            node.ctype = parse_type(item["type"])
        return node

    def _expression(self, item: Dict[str, Any]) -> ast.Expression:
        kind = _kind(item)

        if kind == "IntegerLiteral":
            value = _require(item, "value")
            if not isinstance(value, int) or isinstance(value, bool):
                raise LoadError(f"IntegerLiteral value must be an integer, got {value!r}")
            return ast.IntegerLiteral(value)

        elif kind == "CharacterLiteral":
            value = _require(item, "value")
            if isinstance(value, str):
                if len(value) != 1:
                    raise LoadError(f"CharacterLiteral must be one character, got {value!r}")
                value = ord(value)
            elif not isinstance(value, int) or isinstance(value, bool):
                raise LoadError(f"CharacterLiteral value must be a character or code, got {value!r}")
            return ast.CharacterLiteral(value)

        elif kind == "DeclRef":
            name = _require(item, "name", str)
            decl = self.scope.resolve(name)
            if decl is None:
                raise LoadError(f"Use of undeclared variable '{name}'")
            return ast.DeclRef(decl)

        elif kind == "UnaryOperator":
            op = _require(item, "op", str)
            if op not in _UNARY_OPS:
                raise LoadError(f"Unknown unary operator: {op!r}")
            operand = self.expression(_require(item, "operand"))
            return ast.UnaryOperator(op, operand, ctype=_unary_type(op, operand))

        elif kind == "Paren":
            return ast.ParenExpr(self.expression(_require(item, "expr")))

        elif kind == "ImplicitCast":
            return ast.ImplicitCast(self.expression(_require(item, "expr")))

        elif kind == "Cast":
            return ast.CastExpr(parse_type(_require(item, "type")), self.expression(_require(item, "expr")))

        elif kind == "SizeOf":
            if "type" in item:
                return ast.SizeOfExpr(operand_type=parse_type(item["type"]))
            return ast.SizeOfExpr(operand=self.expression(_require(item, "expr")))

        elif kind == "ArraySubscript":
            base = self.expression(_require(item, "base"))
            index = self.expression(_require(item, "index"))
            return ast.ArraySubscript(base, index, ctype=base.ctype.element_type() or ast.INT_TYPE)

        elif kind == "BinaryOperator":
            op = _require(item, "op", str)
            if op == "=":
                return self._assignment(item)
            if op not in _BINARY_OPS:
                raise LoadError(f"Unknown binary operator: {op!r}")
            left = self.expression(_require(item, "lhs"))
            right = self.expression(_require(item, "rhs"))
            return ast.BinaryOperator(op, left, right, ctype=_binary_type(op, left, right))

        elif kind == "Assign":
            return self._assignment(item)

        elif kind == "Call":
            callee = self._function(_require(item, "callee", str))
            args = [self.expression(a) for a in _list(item, "args")]
            return ast.CallExpression(callee, args)

        raise LoadError(f"Unknown node kind: {kind!r}")

    def _assignment(self, item: Dict[str, Any]) -> ast.AssignmentExpression:
        target = self.expression(_require(item, "lhs"))
        value = self.expression(_require(item, "rhs"))
        return ast.AssignmentExpression(target, value)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _kind(item: Any) -> str:
    if not isinstance(item, dict) or not isinstance(item.get("kind"), str):
        raise LoadError(f"Expected a node object with a 'kind', got {item!r}")
    return item["kind"]


def _require(item: Any, key: str, expected: Optional[type] = None) -> Any:
    if not isinstance(item, dict):
        raise LoadError(f"Expected an object with '{key}', got {item!r}")
    if key not in item:
        raise LoadError(f"{item.get('kind', 'node')} is missing '{key}'")
    value = item[key]
    if expected is not None and not isinstance(value, expected):
        raise LoadError(f"{item.get('kind', 'node')}: '{key}' must be a {expected.__name__}, got {value!r}")
    return value


def _list(item: Dict[str, Any], key: str) -> list:
    value = item.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise LoadError(f"{item.get('kind', 'node')}: '{key}' must be a list, got {value!r}")
    return value


def _unary_type(op: str, operand: ast.Expression) -> ast.CType:
    if op == "*":
        return operand.ctype.element_type() or ast.INT_TYPE
    if op == "&":
        if operand.ctype.is_array():
            return ast.pointer_to(operand.ctype.pointee)
        return ast.pointer_to(operand.ctype)
    return operand.ctype


def _binary_type(op: str, left: ast.Expression, right: ast.Expression) -> ast.CType:
    left_ptr = left.ctype.is_pointer_like()
    right_ptr = right.ctype.is_pointer_like()
    if op == "+" and (left_ptr or right_ptr) and not (left_ptr and right_ptr):
        return _decay(left.ctype if left_ptr else right.ctype)
    if op == "-" and left_ptr and not right_ptr:
        return _decay(left.ctype)
    return ast.INT_TYPE


def _decay(ctype: ast.CType) -> ast.CType:
    return ast.pointer_to(ctype.pointee) if ctype.is_array() else ctype


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def load_document(doc: Any) -> ast.TranslationUnit:
    """Decode an already-parsed JSON document."""
    try:
        return _Decoder().decode_unit(doc)
    except RecursionError:
        raise LoadError("Document is nested too deeply") from None


def loads(text: str) -> ast.TranslationUnit:
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise LoadError(f"Invalid JSON: {e}") from None
    except RecursionError:
        raise LoadError("Invalid JSON: nested too deeply") from None
    return load_document(doc)


def load_program(path: str) -> ast.TranslationUnit:
    """Load a MiniC AST document from a ``.json`` file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise LoadError(f"{path} is not valid UTF-8: {e}") from None
    return loads(text)
