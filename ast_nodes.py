class ASTNode:
    # Optional source line (1-based). Parser may set this.
    line: int | None = None


class Statement(ASTNode):
    pass


class Expression(ASTNode):
    pass


class Program(ASTNode):
    def __init__(self, body):
        self.body = body  # list[Statement]


# ---------- statements ----------

class VariableDeclaration(Statement):
    def __init__(self, name, value=None, kind="let"):
        self.name = name    # str | None
        self.value = value  # expr | None
        self.kind = kind    # "let" or "const"


class PrintStatement(Statement):
    def __init__(self, expression):
        self.expression = expression


class IfStatement(Statement):
    def __init__(self, test, consequent, alternate=None):
        self.test = test
        self.consequent = consequent  # BlockStatement | None
        self.alternate = alternate    # IfStatement | BlockStatement | None


class WhileStatement(Statement):
    def __init__(self, test, body):
        self.test = test
        self.body = body


class ForStatement(Statement):
    def __init__(self, init, test, update, body):
        self.init = init      # VariableDeclaration | expr | None
        self.test = test      # expr | None
        self.update = update  # expr | None
        self.body = body


class ReturnStatement(Statement):
    def __init__(self, argument=None):
        self.argument = argument


class BreakStatement(Statement):
    pass


class ContinueStatement(Statement):
    pass


class BlockStatement(Statement):
    def __init__(self, body):
        self.body = body


class ExpressionStatement(Statement):
    def __init__(self, expression):
        self.expression = expression


class FunctionDeclaration(Statement):
    def __init__(self, name, params, body, is_async=False):
        self.name = name
        self.params = params  # list[str]
        self.body = body      # BlockStatement | None
        self.is_async = is_async


class ImportDeclaration(Statement):
    def __init__(self, source, specifiers=None):
        self.source = source          # str | None
        self.specifiers = specifiers  # list[str] | None (bare import)


class ExportNamedDeclaration(Statement):
    def __init__(self, declaration=None, specifiers=None):
        self.declaration = declaration  # VariableDeclaration | FunctionDeclaration | None
        self.specifiers = specifiers    # list[str] | None

    def exported_names(self):
        if self.declaration is not None:
            name = getattr(self.declaration, "name", None)
            return [name] if name else []
        return list(self.specifiers or [])


# ---------- expressions ----------

class BinaryExpression(Expression):
    def __init__(self, operator, left, right):
        self.operator = operator
        self.left = left
        self.right = right


class AssignmentExpression(Expression):
    def __init__(self, target, value):
        self.target = target
        self.value = value


class AwaitExpression(Expression):
    def __init__(self, argument):
        self.argument = argument


class ArrowFunctionExpression(Expression):
    def __init__(self, params, body, is_async=False):
        self.params = params  # list[str]
        self.body = body      # BlockStatement | expr | None
        self.is_async = is_async


class CallExpression(Expression):
    def __init__(self, callee, arguments):
        self.callee = callee
        self.arguments = arguments


class MemberExpression(Expression):
    def __init__(self, object, property):
        self.object = object
        self.property = property  # Identifier


class Literal(Expression):
    def __init__(self, value):
        self.value = value


class Identifier(Expression):
    def __init__(self, name):
        self.name = name
