# src/minic/minic_ast.py
"""Node classes for an already-parsed, already-typed MiniC program.

A front end (see ``minic.loader``) builds these. Nodes compare and hash by
identity, so the evaluator can use them directly as memo and binding keys.
"""

# Type tags
INT = "int"
CHAR = "char"
POINTER = "pointer"
ARRAY = "array"


class CType:
    def __init__(self, kind, pointee=None, length=None):
        self.kind = kind
        self.pointee = pointee
        self.length = length

    def is_pointer(self):
        return self.kind == POINTER

    def is_array(self):
        return self.kind == ARRAY

    def is_pointer_like(self):
        """Pointers and arrays (which decay to their base address)."""
        return self.kind in (POINTER, ARRAY)

    def element_type(self):
        return self.pointee if self.is_pointer_like() else None

    def __eq__(self, other):
        if not isinstance(other, CType):
            return NotImplemented
        return (self.kind == other.kind and self.pointee == other.pointee
                and self.length == other.length)

    def __hash__(self):
        return hash((self.kind, self.pointee, self.length))

    def __str__(self):
        if self.kind == POINTER:
            return f"{self.pointee}*"
        if self.kind == ARRAY:
            return f"{self.pointee}[{self.length}]"
        return self.kind

    def __repr__(self):
        return f"CType({self})"


INT_TYPE = CType(INT)
CHAR_TYPE = CType(CHAR)


def pointer_to(ctype):
    return CType(POINTER, pointee=ctype)


def array_of(ctype, length):
    return CType(ARRAY, pointee=ctype, length=length)


# Base classes
class Node:
    def __repr__(self):
        return f"{self.__class__.__name__}()"

    def __str__(self):
        return self.__repr__()


class Statement(Node): pass


class Expression(Node):
    ctype = INT_TYPE


# Declarations
class VarDecl(Node):
    """A declared variable: global, local, or function parameter."""
    def __init__(self, name, ctype=INT_TYPE, init=None):
        self.name = name
        self.ctype = ctype
        self.init = init

    def __repr__(self):
        return f"VarDecl(name={self.name}, type={self.ctype})"


class FunctionDecl(Node):
    def __init__(self, name, params=None, body=None, return_type=INT_TYPE):
        self.name = name
        self.params = params or []
        self.body = body
        self.return_type = return_type

    def is_definition(self):
        return self.body is not None

    def __repr__(self):
        return f"FunctionDecl(name={self.name}, params={len(self.params)})"


class TranslationUnit(Node):
    def __init__(self, decls=None):
        self.decls = decls or []

    def functions(self):
        return [d for d in self.decls if isinstance(d, FunctionDecl)]

    def variables(self):
        return [d for d in self.decls if isinstance(d, VarDecl)]

    def __repr__(self):
        return f"TranslationUnit(decls={len(self.decls)})"


# Statement Nodes
class CompoundStmt(Statement):
    def __init__(self, statements=None):
        self.statements = statements or []

    def __repr__(self):
        return f"CompoundStmt(statements={len(self.statements)})"


class DeclStmt(Statement):
    def __init__(self, decls):
        self.decls = decls

    def __repr__(self):
        return f"DeclStmt(decls={[d.name for d in self.decls]})"


class ExpressionStatement(Statement):
    def __init__(self, expression):
        self.expression = expression

    def __repr__(self):
        return f"ExpressionStatement(expression={self.expression})"


class IfStmt(Statement):
    def __init__(self, condition, then, alternative=None):
        self.condition = condition
        self.then = then
        self.alternative = alternative

    def __repr__(self):
        return f"IfStmt(condition={self.condition}, has_else={self.alternative is not None})"


class WhileStmt(Statement):
    def __init__(self, condition, body):
        self.condition = condition
        self.body = body

    def __repr__(self):
        return f"WhileStmt(condition={self.condition})"


class ForStmt(Statement):
    def __init__(self, init, condition, increment, body):
        self.init = init
        self.condition = condition
        self.increment = increment
        self.body = body

    def __repr__(self):
        return f"ForStmt(condition={self.condition}, increment={self.increment})"


class ReturnStmt(Statement):
    def __init__(self, value=None):
        self.value = value

    def __repr__(self):
        return f"ReturnStmt(value={self.value})"


class NullStmt(Statement): pass


# Expression Nodes
class IntegerLiteral(Expression):
    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"IntegerLiteral({self.value})"


class CharacterLiteral(Expression):
    ctype = CHAR_TYPE

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"CharacterLiteral({self.value!r})"


class DeclRef(Expression):
    def __init__(self, decl):
        self.decl = decl

    @property
    def ctype(self):
        return self.decl.ctype

    def __repr__(self):
        return f"DeclRef({self.decl.name})"


class UnaryOperator(Expression):
    """Prefix ``-``, ``+``, ``*`` (dereference) or ``&`` (address-of)."""
    def __init__(self, operator, operand, ctype=None):
        self.operator = operator
        self.operand = operand
        if ctype is not None:
            self.ctype = ctype

    def __repr__(self):
        return f"UnaryOperator({self.operator}{self.operand})"


class ParenExpr(Expression):
    def __init__(self, inner):
        self.inner = inner

    @property
    def ctype(self):
        return self.inner.ctype

    def __repr__(self):
        return f"ParenExpr({self.inner})"


class ImplicitCast(Expression):
    def __init__(self, inner, ctype=None):
        self.inner = inner
        self.ctype = ctype if ctype is not None else inner.ctype

    def __repr__(self):
        return f"ImplicitCast({self.inner})"


class CastExpr(Expression):
    def __init__(self, target, inner):
        self.ctype = target
        self.inner = inner

    def __repr__(self):
        return f"CastExpr(({self.ctype}) {self.inner})"


class SizeOfExpr(Expression):
    """``sizeof(type)`` or ``sizeof expr``; exactly one of the two is set."""
    def __init__(self, operand_type=None, operand=None):
        self.operand_type = operand_type
        self.operand = operand

    def __repr__(self):
        return f"SizeOfExpr({self.operand_type or self.operand})"


class ArraySubscript(Expression):
    def __init__(self, base, index, ctype=None):
        self.base = base
        self.index = index
        if ctype is not None:
            self.ctype = ctype

    def __repr__(self):
        return f"ArraySubscript({self.base}[{self.index}])"


class BinaryOperator(Expression):
    """Arithmetic ``+ - * /`` and relational ``< > ==``."""
    def __init__(self, operator, left, right, ctype=None):
        self.operator = operator
        self.left = left
        self.right = right
        if ctype is not None:
            self.ctype = ctype

    def __repr__(self):
        return f"BinaryOperator({self.left} {self.operator} {self.right})"


class AssignmentExpression(Expression):
    def __init__(self, target, value):
        self.target = target
        self.value = value

    @property
    def ctype(self):
        return self.target.ctype

    def __repr__(self):
        return f"AssignmentExpression({self.target} = {self.value})"


class CallExpression(Expression):
    def __init__(self, callee, arguments=None, ctype=None):
        self.callee = callee
        self.arguments = arguments or []
        self._ctype = ctype

    @property
    def ctype(self):
        # Builtin prototypes are untyped; an explicit type from the document wins
        return self._ctype if self._ctype is not None else self.callee.return_type

    @ctype.setter
    def ctype(self, value):
        self._ctype = value

    def __repr__(self):
        return f"CallExpression({self.callee.name}, args={len(self.arguments)})"


def children(node):
    """Direct child nodes, in evaluation order."""
    if isinstance(node, TranslationUnit):
        return list(node.decls)
    if isinstance(node, FunctionDecl):
        return list(node.params) + ([node.body] if node.body is not None else [])
    if isinstance(node, VarDecl):
        return [node.init] if node.init is not None else []
    if isinstance(node, CompoundStmt):
        return list(node.statements)
    if isinstance(node, DeclStmt):
        return list(node.decls)
    if isinstance(node, ExpressionStatement):
        return [node.expression]
    if isinstance(node, IfStmt):
        return [n for n in (node.condition, node.then, node.alternative) if n is not None]
    if isinstance(node, WhileStmt):
        return [node.condition, node.body]
    if isinstance(node, ForStmt):
        return [n for n in (node.init, node.condition, node.increment, node.body) if n is not None]
    if isinstance(node, ReturnStmt):
        return [node.value] if node.value is not None else []
    if isinstance(node, UnaryOperator):
        return [node.operand]
    if isinstance(node, (ParenExpr, ImplicitCast, CastExpr)):
        return [node.inner]
    if isinstance(node, SizeOfExpr):
        return [node.operand] if node.operand is not None else []
    if isinstance(node, ArraySubscript):
        return [node.base, node.index]
    if isinstance(node, BinaryOperator):
        return [node.left, node.right]
    if isinstance(node, AssignmentExpression):
        return [node.target, node.value]
    if isinstance(node, CallExpression):
        return list(node.arguments)
    return []
