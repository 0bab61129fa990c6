from collections import deque

from ast_nodes import (
    Program, VariableDeclaration, PrintStatement, IfStatement, WhileStatement, ForStatement,
    ReturnStatement, BreakStatement, ContinueStatement, BlockStatement, ExpressionStatement,
    FunctionDeclaration, ImportDeclaration, ExportNamedDeclaration,
    BinaryExpression, AssignmentExpression, AwaitExpression, ArrowFunctionExpression,
    CallExpression, MemberExpression, Literal, Identifier,
)
from lexer import Lexer, KEYWORD, IDENT, NUMBER, STRING, OP, PUNCT

# Binding power, lowest to highest.
PRECEDENCE = {
    "||": 1,
    "&&": 2,
    "==": 3, "!=": 3,
    ">": 4, "<": 4, ">=": 4, "<=": 4,
    "+": 5, "-": 5,
    "*": 6, "/": 6, "%": 6,
}
MAX_PRECEDENCE = max(PRECEDENCE.values())

# The fetch keyword lowers to a call against this name.
FETCH_CALLEE = "fetch"

# How far ahead '(' is scanned looking for ') =>'.
ARROW_SCAN_LIMIT = 20


class Parser:
    """Recursive-descent parser over a one-shot token stream.

    Tokens are consumed destructively from the front. Nothing here raises on
    bad input: a construct that is missing or malformed leaves its field as
    None and parsing carries on with the next statement.
    """

    def __init__(self, lexer):
        self.tokens = deque(lexer.tokens())

    # ---------- TOKEN HELPERS ----------
    @property
    def current_token(self):
        return self.tokens[0] if self.tokens else None

    def peek(self, offset=1):
        if offset < len(self.tokens):
            return self.tokens[offset]
        return None

    def check(self, token_type, value=None):
        tok = self.current_token
        return tok is not None and tok.is_(token_type, value)

    def advance(self):
        return self.tokens.popleft() if self.tokens else None

    # move to next token, but only if it matches what we expect
    def eat(self, token_type, value=None):
        if self.check(token_type, value):
            return self.advance()
        return None

    def skip_semicolon(self):
        self.eat(PUNCT, ";")

    # ---------- TOP LEVEL ----------
    def parse(self):
        body = self.statement_list(until_brace=False)
        return Program(body)

    def statement_list(self, until_brace):
        statements = []
        while self.tokens:
            if until_brace and self.check(PUNCT, "}"):
                break
            remaining = len(self.tokens)
            stmt = self.statement()
            if stmt is not None:
                statements.append(stmt)
            elif len(self.tokens) == remaining:
                # nothing matched; drop the offending token so we always make progress
                self.advance()
        return statements

    # ---------- STATEMENTS ----------
    def statement(self):
        tok = self.current_token
        if tok is None:
            return None

        if tok.type == KEYWORD:
            handler = self.KEYWORD_STATEMENTS.get(tok.value)
            if handler is not None:
                node = handler(self)
                if node is not None:
                    return node
            elif tok.value == "aasynk" and self.peek() is not None and self.peek().is_(KEYWORD, "karya"):
                return self.function_declaration()

        if tok.is_(PUNCT, "{"):
            return self.block()

        if tok.is_(PUNCT, ";"):
            self.advance()
            return None

        expr = self.expr()
        self.skip_semicolon()
        if expr is None:
            return None
        node = ExpressionStatement(expr)
        node.line = tok.line
        return node

    def declaration(self):
        # ye <name> [= expr]   /   sthayi <name> [= expr]
        tok = self.advance()
        kind = "const" if tok.value == "sthayi" else "let"
        name_tok = self.eat(IDENT)
        value = None
        if self.eat(OP, "="):
            value = self.expr()
        node = VariableDeclaration(name_tok.value if name_tok else None, value, kind)
        node.line = tok.line
        return node

    def variable_statement(self):
        node = self.declaration()
        self.skip_semicolon()
        return node

    def print_statement(self):
        tok = self.advance()
        node = PrintStatement(self.expr())
        node.line = tok.line
        self.skip_semicolon()
        return node

    def if_statement(self):
        # Grammar:
        #   agar expr block (nahitoh expr block)* (warna block)?
        # else-if clauses are folded right-to-left into nested IfStatements.
        tok = self.advance()
        test = self.expr()
        consequent = self.block()

        chain = []
        while self.check(KEYWORD, "nahitoh"):
            elif_tok = self.advance()
            chain.append((elif_tok, self.expr(), self.block()))

        alternate = None
        if self.eat(KEYWORD, "warna"):
            alternate = self.block()

        for elif_tok, elif_test, elif_block in reversed(chain):
            alternate = IfStatement(elif_test, elif_block, alternate)
            alternate.line = elif_tok.line

        node = IfStatement(test, consequent, alternate)
        node.line = tok.line
        return node

    def while_statement(self):
        tok = self.advance()
        test = self.expr()
        body = self.block()
        node = WhileStatement(test, body)
        node.line = tok.line
        return node

    def for_statement(self):
        # jabtak [( [init] ; [test] ; [update] )] block
        tok = self.advance()
        init = test = update = None
        if self.eat(PUNCT, "("):
            if self.check(KEYWORD, "ye") or self.check(KEYWORD, "sthayi"):
                init = self.declaration()
            elif not self.check(PUNCT, ";"):
                init = self.expr()
            self.skip_semicolon()

            if not self.check(PUNCT, ";"):
                test = self.expr()
            self.skip_semicolon()

            if not self.check(PUNCT, ")"):
                update = self.expr()
            self.eat(PUNCT, ")")

        body = self.block()
        node = ForStatement(init, test, update, body)
        node.line = tok.line
        return node

    def return_statement(self):
        tok = self.advance()
        node = ReturnStatement(self.expr())
        node.line = tok.line
        self.skip_semicolon()
        return node

    def break_statement(self):
        tok = self.advance()
        self.skip_semicolon()
        node = BreakStatement()
        node.line = tok.line
        return node

    def continue_statement(self):
        tok = self.advance()
        self.skip_semicolon()
        node = ContinueStatement()
        node.line = tok.line
        return node

    def function_declaration(self):
        # [aasynk] karya <name> ( params ) block
        tok = self.current_token
        is_async = self.eat(KEYWORD, "aasynk") is not None
        self.eat(KEYWORD, "karya")
        name_tok = self.eat(IDENT)
        params = self.params()
        body = self.block()
        node = FunctionDeclaration(name_tok.value if name_tok else None, params, body, is_async)
        node.line = tok.line
        return node

    def import_statement(self):
        # aayaat "path"   /   aayaat { a, b } se "path"
        tok = self.advance()
        specifiers = None
        if self.eat(PUNCT, "{"):
            specifiers = []
            while self.tokens and not self.check(PUNCT, "}"):
                name_tok = self.eat(IDENT)
                if name_tok is not None:
                    specifiers.append(name_tok.value)
                elif not self.eat(PUNCT, ","):
                    break
            self.eat(PUNCT, "}")
            self.eat(KEYWORD, "se")

        source_tok = self.eat(STRING)
        self.skip_semicolon()
        node = ImportDeclaration(source_tok.value if source_tok else None, specifiers)
        node.line = tok.line
        return node

    def export_statement(self):
        # niryaat <declaration>   /   niryaat <name>
        tok = self.advance()
        if self.check(KEYWORD, "ye") or self.check(KEYWORD, "sthayi"):
            node = ExportNamedDeclaration(declaration=self.variable_statement())
        elif self.check(KEYWORD, "karya") or self.check(KEYWORD, "aasynk"):
            node = ExportNamedDeclaration(declaration=self.function_declaration())
        elif self.check(IDENT):
            node = ExportNamedDeclaration(specifiers=[self.advance().value])
            self.skip_semicolon()
        else:
            node = ExportNamedDeclaration()
        node.line = tok.line
        return node

    KEYWORD_STATEMENTS = {
        "ye": variable_statement,
        "sthayi": variable_statement,
        "bol": print_statement,
        "agar": if_statement,
        "lagataar": while_statement,
        "jabtak": for_statement,
        "wapas": return_statement,
        "ruk": break_statement,
        "chhod": continue_statement,
        "karya": function_declaration,
        "aayaat": import_statement,
        "niryaat": export_statement,
    }

    def block(self):
        if not self.check(PUNCT, "{"):
            return None
        tok = self.advance()
        body = self.statement_list(until_brace=True)
        self.eat(PUNCT, "}")
        node = BlockStatement(body)
        node.line = tok.line
        return node

    def params(self):
        params = []
        if not self.eat(PUNCT, "("):
            return params
        while self.tokens and not self.check(PUNCT, ")"):
            name_tok = self.eat(IDENT)
            if name_tok is not None:
                params.append(name_tok.value)
                self.eat(PUNCT, ",")
            else:
                # skip unexpected
                self.advance()
        self.eat(PUNCT, ")")
        return params

    def arguments(self):
        # Assumes '(' has already been consumed.
        args = []
        while self.tokens and not self.check(PUNCT, ")"):
            arg = self.expr()
            if arg is not None:
                args.append(arg)
            if not self.eat(PUNCT, ",") and arg is None:
                break
        self.eat(PUNCT, ")")
        return args

    # ---------- EXPRESSIONS ----------
    # expr -> assignment (binary_expr with precedence climbing underneath)
    def expr(self):
        left = self.binary_expr(0)
        if left is None:
            return None
        if self.check(OP, "="):
            tok = self.advance()
            node = AssignmentExpression(left, self.expr())
            node.line = tok.line
            return node
        return left

    def binary_expr(self, precedence):
        left = self.unary()
        if left is None:
            return None

        while True:
            tok = self.current_token
            if tok is None or tok.type != OP:
                break
            prec = PRECEDENCE.get(tok.value, 0)
            if prec <= precedence:
                break
            self.advance()
            right = self.binary_expr(prec)
            left = BinaryExpression(tok.value, left, right)
            left.line = tok.line
        return left

    # unary -> pratiksha unary | primary
    def unary(self):
        tok = self.current_token
        if tok is not None and tok.is_(KEYWORD, "pratiksha"):
            self.advance()
            node = AwaitExpression(self.binary_expr(MAX_PRECEDENCE))
            node.line = tok.line
            return node
        return self.primary()

    def primary(self):
        tok = self.current_token
        if tok is None:
            return None

        if tok.type in (NUMBER, STRING):
            self.advance()
            node = Literal(tok.value)
            node.line = tok.line
            return node

        if tok.is_(KEYWORD, "aasynk") and self.peek() is not None and self.peek().is_(PUNCT, "("):
            self.advance()
            return self.arrow_function(tok, is_async=True)

        if tok.is_(KEYWORD, "lao"):
            return self.fetch_expr()

        if tok.type == IDENT:
            self.advance()
            node = Identifier(tok.value)
            node.line = tok.line
            return self.postfix(node)

        if tok.is_(PUNCT, "("):
            if self.arrow_ahead():
                return self.arrow_function(tok, is_async=False)
            self.advance()
            node = self.expr()
            self.eat(PUNCT, ")")
            return node

        return None

    def postfix(self, node):
        # call and member chains, left-associative: a.b(c).d(e)
        while self.tokens:
            if self.check(PUNCT, "("):
                tok = self.advance()
                node = CallExpression(node, self.arguments())
                node.line = tok.line
                continue
            if self.check(PUNCT, ".") and self.peek() is not None and self.peek().type == IDENT:
                self.advance()
                prop_tok = self.advance()
                prop = Identifier(prop_tok.value)
                prop.line = prop_tok.line
                node = MemberExpression(node, prop)
                node.line = prop_tok.line
                continue
            break
        return node

    def fetch_expr(self):
        # lao <expr>   /   lao ( args )
        tok = self.advance()
        if self.eat(PUNCT, "("):
            args = self.arguments()
        else:
            arg = self.expr()
            args = [arg] if arg is not None else []
        callee = Identifier(FETCH_CALLEE)
        callee.line = tok.line
        node = CallExpression(callee, args)
        node.line = tok.line
        return node

    def arrow_ahead(self):
        # ( ident [, ident]* ) =>   within ARROW_SCAN_LIMIT tokens
        for i in range(1, min(len(self.tokens), ARROW_SCAN_LIMIT)):
            tok = self.tokens[i]
            if tok.is_(PUNCT, ")"):
                nxt = self.peek(i + 1)
                return nxt is not None and nxt.is_(OP, "=>")
            if tok.type != IDENT and not tok.is_(PUNCT, ","):
                return False
        return False

    def arrow_function(self, tok, is_async):
        params = self.params()
        if not self.eat(OP, "=>"):
            return None
        if self.check(PUNCT, "{"):
            body = self.block()
        else:
            body = self.expr()
        node = ArrowFunctionExpression(params, body, is_async)
        node.line = tok.line
        return node


def parse(text):
    return Parser(Lexer(text)).parse()
