import json
import textwrap
from string import Template

from ast_nodes import (
    Program, VariableDeclaration, PrintStatement, IfStatement, WhileStatement, ForStatement,
    ReturnStatement, BreakStatement, ContinueStatement, BlockStatement, ExpressionStatement,
    FunctionDeclaration, ImportDeclaration, ExportNamedDeclaration,
    BinaryExpression, AssignmentExpression, AwaitExpression, ArrowFunctionExpression,
    CallExpression, MemberExpression, Literal, Identifier,
)
from config import FetchConfig
from parser import PRECEDENCE, MAX_PRECEDENCE, FETCH_CALLEE

# Reserved names shared with the module resolver and the runtime.
FETCH_HELPER = "__shar_fetch"
EXPORTS_NAME = "__shar_exports"

INDENT = "    "

_FETCH_HELPER_TEMPLATE = Template(r"""const __shar_fetch = (url, opts) => {
    const base = $base;
    const defHeaders = $headers;
    const finalUrl = (typeof url === 'string' && base && !/^https?:\/\//.test(url))
        ? (base.replace(/\/$$/, '') + '/' + url.replace(/^\//, ''))
        : url;
    const options = Object.assign({}, opts || {});
    if (defHeaders) {
        options.headers = Object.assign({}, defHeaders, options.headers || {});
    }
    return fetch(finalUrl, options).then(r => r.json());
};""")


def export_assignment(name):
    return f'var {EXPORTS_NAME} = {EXPORTS_NAME} || {{}}; {EXPORTS_NAME}["{name}"] = {name};'


class Compiler:
    """Lowers an AST to JavaScript source text.

    ``compile`` is pure: the same tree always produces the same text and the
    tree is never modified.
    """

    def __init__(self, config: FetchConfig | None = None):
        self.config = config or FetchConfig()

    def helper_prelude(self):
        return _FETCH_HELPER_TEMPLATE.substitute(
            base=json.dumps(self.config.base_url),
            headers=json.dumps(self.config.default_headers),
        )

    def compile(self, node):
        if node is None:
            return ""
        if isinstance(node, Program):
            parts = [self.compile(stmt) for stmt in node.body]
            return "\n".join(p for p in parts if p)
        if isinstance(node, ImportDeclaration):
            # imports are wired up by the module resolver
            return ""
        if isinstance(node, (
            VariableDeclaration, PrintStatement, IfStatement, WhileStatement, ForStatement,
            ReturnStatement, BreakStatement, ContinueStatement, BlockStatement, ExpressionStatement,
            FunctionDeclaration, ExportNamedDeclaration,
        )):
            return self.compile_stmt(node)
        return self.compile_expr(node)

    # -------- statements --------
    def compile_stmt(self, node):
        if isinstance(node, VariableDeclaration):
            return self.compile_declaration(node) + ";"

        if isinstance(node, PrintStatement):
            return f"console.log({self.compile_expr(node.expression)});"

        if isinstance(node, IfStatement):
            text = f"if ({self.compile_expr(node.test)}) {self.compile_block(node.consequent)}"
            if node.alternate is not None:
                if isinstance(node.alternate, IfStatement):
                    text += " else " + self.compile_stmt(node.alternate)
                else:
                    text += " else " + self.compile_block(node.alternate)
            return text

        if isinstance(node, WhileStatement):
            return f"while ({self.compile_expr(node.test)}) {self.compile_block(node.body)}"

        if isinstance(node, ForStatement):
            return self.compile_for(node)

        if isinstance(node, ReturnStatement):
            if node.argument is None:
                return "return;"
            return f"return {self.compile_expr(node.argument)};"

        if isinstance(node, BreakStatement):
            return "break;"

        if isinstance(node, ContinueStatement):
            return "continue;"

        if isinstance(node, BlockStatement):
            return self.compile_block(node)

        if isinstance(node, ExpressionStatement):
            return self.compile_expr(node.expression) + ";"

        if isinstance(node, FunctionDeclaration):
            prefix = "async " if node.is_async else ""
            params = ", ".join(node.params or [])
            return f"{prefix}function {node.name or ''}({params}) {self.compile_block(node.body)}"

        if isinstance(node, ExportNamedDeclaration):
            return self.compile_export(node)

        return ""

    def compile_declaration(self, node):
        kind = "const" if node.kind == "const" else "let"
        if node.value is None:
            return f"{kind} {node.name or ''}"
        return f"{kind} {node.name or ''} = {self.compile_expr(node.value)}"

    def compile_block(self, node):
        # a missing block renders as an empty one so the output stays well-formed
        if node is None:
            return "{\n}"
        parts = [self.compile(stmt) for stmt in node.body]
        inner = "\n".join(p for p in parts if p)
        if not inner:
            return "{\n}"
        return "{\n" + textwrap.indent(inner, INDENT) + "\n}"

    def compile_for(self, node):
        init = ""
        if isinstance(node.init, VariableDeclaration):
            init = self.compile_declaration(node.init)
        elif node.init is not None:
            init = self.compile_expr(node.init)
        test = self.compile_expr(node.test)
        update = self.compile_expr(node.update)
        return f"for ({init}; {test}; {update}) {self.compile_block(node.body)}"

    def compile_export(self, node):
        lines = []
        if node.declaration is not None:
            lines.append(self.compile_stmt(node.declaration))
        for name in node.exported_names():
            lines.append(export_assignment(name))
        return "\n".join(lines)

    # -------- expressions --------
    def compile_expr(self, node):
        if node is None:
            return ""

        if isinstance(node, Literal):
            return json.dumps(node.value, ensure_ascii=False)

        if isinstance(node, Identifier):
            return node.name

        if isinstance(node, BinaryExpression):
            prec = PRECEDENCE.get(node.operator, 0)
            left = self.compile_operand(node.left, prec, right_side=False)
            right = self.compile_operand(node.right, prec, right_side=True)
            return f"{left} {node.operator} {right}"

        if isinstance(node, AssignmentExpression):
            return f"{self.compile_expr(node.target)} = {self.compile_expr(node.value)}"

        if isinstance(node, AwaitExpression):
            return f"await {self.compile_operand(node.argument, MAX_PRECEDENCE + 1, right_side=True)}"

        if isinstance(node, ArrowFunctionExpression):
            prefix = "async " if node.is_async else ""
            params = ", ".join(node.params or [])
            if isinstance(node.body, BlockStatement):
                body = self.compile_block(node.body)
            else:
                body = self.compile_expr(node.body)
            return f"{prefix}({params}) => {body}"

        if isinstance(node, CallExpression):
            args = ", ".join(self.compile_expr(a) for a in node.arguments or [])
            if isinstance(node.callee, Identifier) and node.callee.name == FETCH_CALLEE:
                return f"{FETCH_HELPER}({args})"
            return f"{self.compile_expr(node.callee)}({args})"

        if isinstance(node, MemberExpression):
            return f"{self.compile_expr(node.object)}.{self.compile_expr(node.property)}"

        return ""

    def compile_operand(self, node, parent_prec, right_side):
        text = self.compile_expr(node)
        if isinstance(node, BinaryExpression):
            prec = PRECEDENCE.get(node.operator, 0)
        elif isinstance(node, (AssignmentExpression, ArrowFunctionExpression)):
            prec = 0
        else:
            return text
        if prec < parent_prec or (right_side and prec == parent_prec):
            return f"({text})"
        return text
