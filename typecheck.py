"""Best-effort type inference and validation against a ``.shari`` type spec.

Spec syntax, one declaration per line::

    # comment
    count: number
    label: string|number
    add(a: number, b: number): number

The checker is advisory. It walks the tree once, never modifies it, and
reports findings as two ordered lists of messages: warnings (informational)
and errors (the caller should not run the generated code).
"""

import re

from ast_nodes import (
    Program, VariableDeclaration, PrintStatement, IfStatement, WhileStatement, ForStatement,
    ReturnStatement, BlockStatement, ExpressionStatement,
    FunctionDeclaration, ImportDeclaration, ExportNamedDeclaration,
    BinaryExpression, AssignmentExpression, AwaitExpression, ArrowFunctionExpression,
    CallExpression, MemberExpression, Literal, Identifier,
)
from parser import FETCH_CALLEE

ANY = "any"
VOID = "void"
NUMBER = "number"
STRING = "string"
BOOLEAN = "boolean"
FUNCTION = "function"

ARITHMETIC_OPS = ("+", "-", "*", "/", "%")
COMPARISON_OPS = ("==", "!=", ">", "<", ">=", "<=")
LOGICAL_OPS = ("&&", "||")

_FUNC_LINE = re.compile(r"^([A-Za-z_]\w*)\s*\(([^)]*)\)\s*:\s*(.+)$")
_VAR_LINE = re.compile(r"^([A-Za-z_]\w*)\s*:\s*(.+)$")


class FunctionSignature:
    def __init__(self, params, returns):
        self.params = params    # dict name -> type, in declaration order
        self.returns = returns

    def __repr__(self):
        params = ", ".join(f"{k}: {v}" for k, v in self.params.items())
        return f"({params}): {self.returns}"


class TypeSpec:
    def __init__(self, vars=None, funcs=None):
        self.vars = dict(vars or {})    # name -> type
        self.funcs = dict(funcs or {})  # name -> FunctionSignature


def parse_type_spec(text):
    spec = TypeSpec()
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        m = _FUNC_LINE.match(line)
        if m:
            name, params_part, returns = m.group(1), m.group(2).strip(), m.group(3).strip()
            params = {}
            if params_part:
                for part in params_part.split(","):
                    pname, _, ptype = part.partition(":")
                    pname = pname.strip()
                    if pname:
                        params[pname] = ptype.strip() or ANY
            spec.funcs[name] = FunctionSignature(params, returns)
            continue

        m = _VAR_LINE.match(line)
        if m:
            spec.vars[m.group(1)] = m.group(2).strip()
    return spec


def split_union(type_str):
    return [part.strip() for part in (type_str or "").split("|") if part.strip()]


def type_allows(expected, actual):
    if not expected or expected == ANY or actual == ANY:
        return True
    parts = split_union(expected)
    if ANY in parts:
        return True
    # a union is allowed only if every member is
    return all(member in parts for member in split_union(actual))


class Environment:
    """One lexical scope. Lookups fall back to the parent chain; declarations
    only ever land in this scope's own map."""

    def __init__(self, parent=None):
        self.bindings = {}
        self.variables = set()  # names bound by ye/sthayi in this scope
        self.parent = parent

    def child(self):
        return Environment(self)

    def declare(self, name, type_name):
        self.bindings[name] = type_name

    def lookup(self, name):
        env = self
        while env is not None:
            if name in env.bindings:
                return env.bindings[name]
            env = env.parent
        return None


class FunctionContext:
    def __init__(self, name, signature):
        self.name = name
        self.signature = signature
        self.returns = []  # list[(ReturnStatement, inferred type)]


class TypeCheckResult:
    def __init__(self, warnings, errors):
        self.warnings = warnings
        self.errors = errors

    @property
    def ok(self):
        return not self.errors

    def __repr__(self):
        return f"TypeCheckResult(warnings={len(self.warnings)}, errors={len(self.errors)})"


class TypeChecker:
    def __init__(self, spec=None):
        self.spec = spec or TypeSpec()
        self.warnings = []
        self.errors = []
        self.functions = []  # stack of FunctionContext

    def check(self, program):
        self.warnings = []
        self.errors = []
        self.functions = []

        global_env = Environment()
        for name, type_name in self.spec.vars.items():
            global_env.declare(name, type_name)

        if isinstance(program, Program):
            self.check_statements(program.body, global_env)
        return TypeCheckResult(list(self.warnings), list(self.errors))

    def warn(self, message):
        self.warnings.append(message)

    def error(self, message):
        self.errors.append(message)

    # ---------- inference ----------
    def infer(self, node, env):
        if node is None:
            return ANY

        if isinstance(node, Literal):
            # bool first: bool is an int subclass
            if isinstance(node.value, bool):
                return BOOLEAN
            if isinstance(node.value, (int, float)):
                return NUMBER
            if isinstance(node.value, str):
                return STRING
            return ANY

        if isinstance(node, Identifier):
            return env.lookup(node.name) or ANY

        if isinstance(node, BinaryExpression):
            op = node.operator
            if op in COMPARISON_OPS or op in LOGICAL_OPS:
                return BOOLEAN
            left = self.infer(node.left, env)
            right = self.infer(node.right, env)
            if op == "+":
                if left == STRING or right == STRING:
                    return STRING
                if left == NUMBER and right == NUMBER:
                    return NUMBER
                return ANY
            if op in ARITHMETIC_OPS:
                if left == NUMBER and right == NUMBER:
                    return NUMBER
                return ANY
            return ANY

        if isinstance(node, AssignmentExpression):
            return self.infer(node.value, env)

        if isinstance(node, ArrowFunctionExpression):
            return FUNCTION

        if isinstance(node, CallExpression):
            if isinstance(node.callee, Identifier):
                signature = self.spec.funcs.get(node.callee.name)
                if signature is not None and signature.returns != VOID:
                    return signature.returns
            return ANY

        return ANY

    # ---------- statements ----------
    def check_statements(self, statements, env):
        # function declarations are visible to the whole scope they live in
        for stmt in statements:
            decl = stmt.declaration if isinstance(stmt, ExportNamedDeclaration) else stmt
            if isinstance(decl, FunctionDeclaration) and decl.name:
                env.declare(decl.name, FUNCTION)

        for stmt in statements:
            self.check_statement(stmt, env)

    def check_block(self, block, env):
        if block is None:
            return
        self.check_statements(block.body, env.child())

    def check_statement(self, node, env):
        if node is None:
            return

        if isinstance(node, VariableDeclaration):
            self.check_declaration(node, env)

        elif isinstance(node, FunctionDeclaration):
            self.check_function(node, env)

        elif isinstance(node, BlockStatement):
            self.check_block(node, env)

        elif isinstance(node, IfStatement):
            self.check_condition(node.test, env, "Condition expression evaluated to '{}', expected 'boolean'")
            self.check_block(node.consequent, env)
            if isinstance(node.alternate, IfStatement):
                self.check_statement(node.alternate, env)
            else:
                self.check_block(node.alternate, env)

        elif isinstance(node, WhileStatement):
            self.check_condition(node.test, env, "While condition is '{}', expected 'boolean'")
            self.check_block(node.body, env)

        elif isinstance(node, ForStatement):
            # init/test/update live in a loop-local scope shared with the body
            loop_env = env.child()
            if isinstance(node.init, VariableDeclaration):
                self.check_declaration(node.init, loop_env)
            else:
                self.check_expression(node.init, loop_env)
            if node.test is not None:
                self.check_condition(node.test, loop_env, "For loop test is '{}', expected 'boolean'")
            self.check_expression(node.update, loop_env)
            self.check_block(node.body, loop_env)

        elif isinstance(node, ReturnStatement):
            self.check_expression(node.argument, env)
            if not self.functions:
                self.warn("Return used outside of function")
            else:
                returned = self.infer(node.argument, env)
                self.functions[-1].returns.append((node, returned))

        elif isinstance(node, (ExpressionStatement, PrintStatement)):
            self.check_expression(node.expression, env)

        elif isinstance(node, ImportDeclaration):
            for name in node.specifiers or []:
                env.declare(name, ANY)

        elif isinstance(node, ExportNamedDeclaration):
            if node.declaration is not None:
                self.check_statement(node.declaration, env)
            for name in node.specifiers or []:
                if env.lookup(name) is None:
                    self.warn(f"Export of undeclared identifier '{name}'")

    def check_condition(self, test, env, message):
        self.check_expression(test, env)
        inferred = self.infer(test, env)
        if inferred not in (BOOLEAN, ANY):
            self.warn(message.format(inferred))

    def check_declaration(self, node, env):
        self.check_expression(node.value, env)
        if not node.name:
            return
        if node.name in env.variables:
            self.error(f"Redeclaration of variable {node.name}")
        env.variables.add(node.name)

        inferred = self.infer(node.value, env)
        declared = self.spec.vars.get(node.name)
        if declared is not None and not type_allows(declared, inferred):
            self.error(f"Type error: variable '{node.name}' declared as '{declared}' but assigned '{inferred}'")
            env.declare(node.name, declared)
        elif declared is not None and inferred == ANY:
            env.declare(node.name, declared)
        else:
            env.declare(node.name, inferred)

    def check_function(self, node, env):
        name = node.name
        params = node.params or []
        signature = self.spec.funcs.get(name) if name else None

        if signature is not None and len(signature.params) != len(params):
            self.error(
                f"Function '{name}' parameter count mismatch: "
                f"expected {len(signature.params)} but got {len(params)}"
            )

        local_env = env.child()
        for pname in params:
            ptype = signature.params.get(pname, ANY) if signature is not None else ANY
            local_env.declare(pname, ptype)

        context = FunctionContext(name, signature)
        self.functions.append(context)
        try:
            if node.body is not None:
                self.check_statements(node.body.body, local_env)
        finally:
            self.functions.pop()

        if signature is None or not signature.returns or signature.returns == VOID:
            return
        if not context.returns:
            self.error(f"Function '{name}' must return '{signature.returns}' but no return found")
            return
        for _ret, returned in context.returns:
            if not type_allows(signature.returns, returned):
                self.error(
                    f"Function '{name}' return type mismatch: "
                    f"expected '{signature.returns}' but returned '{returned}'"
                )

    # ---------- expressions ----------
    def check_expression(self, expr, env):
        if expr is None:
            return

        if isinstance(expr, BinaryExpression):
            op = expr.operator
            if op in ARITHMETIC_OPS:
                left = self.infer(expr.left, env)
                right = self.infer(expr.right, env)
                concat = op == "+" and (left == STRING or right == STRING)
                numeric = left == NUMBER and right == NUMBER
                if not concat and not numeric and left != ANY and right != ANY:
                    self.error(f"Operator '{op}' applied to incompatible types: '{left}' and '{right}'")
            self.check_expression(expr.left, env)
            self.check_expression(expr.right, env)

        elif isinstance(expr, Identifier):
            if env.lookup(expr.name) is None:
                self.warn(f"Use of undeclared identifier '{expr.name}' (assumed any)")

        elif isinstance(expr, AssignmentExpression):
            self.check_expression(expr.value, env)
            target = expr.target
            if isinstance(target, Identifier):
                if env.lookup(target.name) is None:
                    self.warn(f"Assignment to undeclared identifier '{target.name}'")
                declared = self.spec.vars.get(target.name)
                inferred = self.infer(expr.value, env)
                if declared is not None and not type_allows(declared, inferred):
                    self.error(
                        f"Type error: variable '{target.name}' declared as '{declared}' but assigned '{inferred}'"
                    )
            else:
                self.check_expression(target, env)

        elif isinstance(expr, CallExpression):
            callee = expr.callee
            if not (isinstance(callee, Identifier) and callee.name == FETCH_CALLEE):
                self.check_expression(callee, env)
            for arg in expr.arguments or []:
                self.check_expression(arg, env)

        elif isinstance(expr, MemberExpression):
            self.check_expression(expr.object, env)

        elif isinstance(expr, AwaitExpression):
            self.check_expression(expr.argument, env)

        elif isinstance(expr, ArrowFunctionExpression):
            local_env = env.child()
            for pname in expr.params or []:
                local_env.declare(pname, ANY)
            self.functions.append(FunctionContext(None, None))
            try:
                if isinstance(expr.body, BlockStatement):
                    self.check_statements(expr.body.body, local_env)
                else:
                    self.check_expression(expr.body, local_env)
            finally:
                self.functions.pop()


def check_types(program, spec=None):
    return TypeChecker(spec).check(program)
