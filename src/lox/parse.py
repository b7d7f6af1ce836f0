"""Lox parser: recursive descent, one method per grammar production.

    program     → declaration* EOF
    declaration → funDecl | varDecl | statement
    statement   → exprStmt | forStmt | ifStmt | printStmt | returnStmt
                | whileStmt | block
    expression  → assignment
    assignment  → IDENTIFIER "=" assignment | logic_or
    logic_or    → logic_and ( "or" logic_and )*
    logic_and   → equality ( "and" equality )*
    equality    → comparison ( ( "!=" | "==" ) comparison )*
    comparison  → term ( ( ">" | ">=" | "<" | "<=" ) term )*
    term        → factor ( ( "-" | "+" ) factor )*
    factor      → unary ( ( "/" | "*" ) unary )*
    unary       → ( "!" | "-" ) unary | call
    call        → primary ( "(" arguments? ")" )*
    primary     → NUMBER | STRING | "true" | "false" | "nil"
                | "(" expression ")" | IDENTIFIER
"""

from __future__ import annotations

from .ast import (
    Assign,
    Binary,
    Block,
    Call,
    Expr,
    Expression,
    Function,
    Grouping,
    If,
    Literal,
    Logical,
    Print,
    Return,
    Stmt,
    Unary,
    Var,
    Variable,
    While,
)
from .errors import Reporter, StaticError
from .tokens import (
    TK_BANG,
    TK_BANG_EQUAL,
    TK_COMMA,
    TK_EOF,
    TK_EQUAL,
    TK_EQUAL_EQUAL,
    TK_GREATER,
    TK_GREATER_EQUAL,
    TK_IDENT,
    TK_LEFT_BRACE,
    TK_LEFT_PAREN,
    TK_LESS,
    TK_LESS_EQUAL,
    TK_MINUS,
    TK_NUMBER,
    TK_PLUS,
    TK_RIGHT_BRACE,
    TK_RIGHT_PAREN,
    TK_SEMICOLON,
    TK_SLASH,
    TK_STAR,
    TK_STRING,
    Token,
)

MAX_ARGS = 255

# Tokens that begin a statement; synchronize() stops in front of them.
STATEMENT_STARTS: set[str] = {
    "class",
    "fun",
    "var",
    "for",
    "if",
    "while",
    "print",
    "return",
}


class ParseError(StaticError):
    """Parse error anchored at a token."""

    def __init__(self, msg: str, token: Token):
        self.token: Token = token
        if token.type == TK_EOF:
            where = " at end"
        else:
            where = " at '" + token.lexeme + "'"
        super().__init__(msg, token.line, where)


class Parser:
    """Recursive descent parser for Lox with panic-mode recovery."""

    def __init__(self, tokens: list[Token], reporter: Reporter):
        self.tokens: list[Token] = tokens
        self.reporter: Reporter = reporter
        self.pos: int = 0
        self.function_depth: int = 0

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def at_end(self) -> bool:
        return self.current().type == TK_EOF

    def advance(self) -> Token:
        if not self.at_end():
            self.pos += 1
        return self.previous()

    def at(self, *types: str) -> bool:
        if self.at_end():
            return False
        return self.current().type in types

    def match(self, *types: str) -> bool:
        if self.at(*types):
            self.advance()
            return True
        return False

    def expect(self, type_: str, msg: str) -> Token:
        if self.at(type_):
            return self.advance()
        raise self.error(self.current(), msg)

    def error(self, token: Token, msg: str) -> ParseError:
        """Report an error and return it; the caller decides whether to unwind."""
        err = ParseError(msg, token)
        self.reporter.error(err)
        return err

    def synchronize(self) -> None:
        """Discard tokens until the start of the next statement."""
        self.advance()
        while not self.at_end():
            if self.previous().type == TK_SEMICOLON:
                return
            if self.current().type in STATEMENT_STARTS:
                return
            self.advance()

    # ── Declarations ─────────────────────────────────────────

    def parse(self) -> list[Stmt]:
        statements: list[Stmt] = []
        while not self.at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    def parse_declaration(self) -> Stmt | None:
        try:
            if self.match("fun"):
                return self.parse_function("function")
            if self.match("var"):
                return self.parse_var_decl()
            return self.parse_statement()
        except ParseError:
            self.synchronize()
            return None

    def parse_function(self, kind: str) -> Function:
        name = self.expect(TK_IDENT, "Expect " + kind + " name.")
        self.expect(TK_LEFT_PAREN, "Expect '(' after " + kind + " name.")
        params: list[Token] = []
        if not self.at(TK_RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGS:
                    self.error(
                        self.current(),
                        "Can't have more than " + str(MAX_ARGS) + " parameters.",
                    )
                params.append(self.expect(TK_IDENT, "Expect parameter name."))
                if not self.match(TK_COMMA):
                    break
        self.expect(TK_RIGHT_PAREN, "Expect ')' after parameters.")
        self.expect(TK_LEFT_BRACE, "Expect '{' before " + kind + " body.")
        self.function_depth += 1
        try:
            body = self.parse_block()
        finally:
            self.function_depth -= 1
        return Function(name, tuple(params), tuple(body))

    def parse_var_decl(self) -> Var:
        name = self.expect(TK_IDENT, "Expect variable name.")
        initializer: Expr | None = None
        if self.match(TK_EQUAL):
            initializer = self.parse_expr()
        self.expect(TK_SEMICOLON, "Expect ';' after variable declaration.")
        return Var(name, initializer)

    # ── Statements ───────────────────────────────────────────

    def parse_statement(self) -> Stmt:
        if self.match("for"):
            return self.parse_for_stmt()
        if self.match("if"):
            return self.parse_if_stmt()
        if self.match("print"):
            return self.parse_print_stmt()
        if self.match("return"):
            return self.parse_return_stmt()
        if self.match("while"):
            return self.parse_while_stmt()
        if self.match(TK_LEFT_BRACE):
            return Block(tuple(self.parse_block()))
        return self.parse_expr_stmt()

    def parse_for_stmt(self) -> Stmt:
        """Desugar `for (init; cond; incr) body` into a while loop."""
        self.expect(TK_LEFT_PAREN, "Expect '(' after 'for'.")
        initializer: Stmt | None
        if self.match(TK_SEMICOLON):
            initializer = None
        elif self.match("var"):
            initializer = self.parse_var_decl()
        else:
            initializer = self.parse_expr_stmt()

        condition: Expr | None = None
        if not self.at(TK_SEMICOLON):
            condition = self.parse_expr()
        self.expect(TK_SEMICOLON, "Expect ';' after loop condition.")

        increment: Expr | None = None
        if not self.at(TK_RIGHT_PAREN):
            increment = self.parse_expr()
        self.expect(TK_RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.parse_statement()
        if increment is not None:
            body = Block((body, Expression(increment)))
        if condition is None:
            condition = Literal(True)
        body = While(condition, body)
        if initializer is not None:
            body = Block((initializer, body))
        return body

    def parse_if_stmt(self) -> If:
        self.expect(TK_LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.parse_expr()
        self.expect(TK_RIGHT_PAREN, "Expect ')' after if condition.")
        then_branch = self.parse_statement()
        else_branch: Stmt | None = None
        if self.match("else"):
            else_branch = self.parse_statement()
        return If(condition, then_branch, else_branch)

    def parse_print_stmt(self) -> Print:
        value = self.parse_expr()
        self.expect(TK_SEMICOLON, "Expect ';' after value.")
        return Print(value)

    def parse_return_stmt(self) -> Return:
        keyword = self.previous()
        if self.function_depth == 0:
            # reported without unwinding
            self.error(keyword, "Can't return from top-level code.")
        value: Expr | None = None
        if not self.at(TK_SEMICOLON):
            value = self.parse_expr()
        self.expect(TK_SEMICOLON, "Expect ';' after return value.")
        return Return(keyword, value)

    def parse_while_stmt(self) -> While:
        self.expect(TK_LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.parse_expr()
        self.expect(TK_RIGHT_PAREN, "Expect ')' after condition.")
        body = self.parse_statement()
        return While(condition, body)

    def parse_block(self) -> list[Stmt]:
        statements: list[Stmt] = []
        while not self.at(TK_RIGHT_BRACE) and not self.at_end():
            stmt = self.parse_declaration()
            if stmt is not None:
                statements.append(stmt)
        self.expect(TK_RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def parse_expr_stmt(self) -> Expression:
        expr = self.parse_expr()
        self.expect(TK_SEMICOLON, "Expect ';' after expression.")
        return Expression(expr)

    # ── Expressions ──────────────────────────────────────────

    def parse_expr(self) -> Expr:
        return self.parse_assignment()

    def parse_assignment(self) -> Expr:
        """Assignment = IDENTIFIER '=' Assignment | Or"""
        expr = self.parse_or()
        if self.match(TK_EQUAL):
            equals = self.previous()
            value = self.parse_assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            # reported without unwinding
            self.error(equals, "Invalid assignment target.")
        return expr

    def parse_or(self) -> Expr:
        """Or = And ( 'or' And )*"""
        left = self.parse_and()
        while self.match("or"):
            operator = self.previous()
            right = self.parse_and()
            left = Logical(left, operator, right)
        return left

    def parse_and(self) -> Expr:
        """And = Equality ( 'and' Equality )*"""
        left = self.parse_equality()
        while self.match("and"):
            operator = self.previous()
            right = self.parse_equality()
            left = Logical(left, operator, right)
        return left

    def parse_equality(self) -> Expr:
        """Equality = Comparison ( ( '!=' | '==' ) Comparison )*"""
        left = self.parse_comparison()
        while self.match(TK_BANG_EQUAL, TK_EQUAL_EQUAL):
            operator = self.previous()
            right = self.parse_comparison()
            left = Binary(left, operator, right)
        return left

    def parse_comparison(self) -> Expr:
        """Comparison = Term ( ( '>' | '>=' | '<' | '<=' ) Term )*"""
        left = self.parse_term()
        while self.match(TK_GREATER, TK_GREATER_EQUAL, TK_LESS, TK_LESS_EQUAL):
            operator = self.previous()
            right = self.parse_term()
            left = Binary(left, operator, right)
        return left

    def parse_term(self) -> Expr:
        """Term = Factor ( ( '-' | '+' ) Factor )*"""
        left = self.parse_factor()
        while self.match(TK_MINUS, TK_PLUS):
            operator = self.previous()
            right = self.parse_factor()
            left = Binary(left, operator, right)
        return left

    def parse_factor(self) -> Expr:
        """Factor = Unary ( ( '/' | '*' ) Unary )*"""
        left = self.parse_unary()
        while self.match(TK_SLASH, TK_STAR):
            operator = self.previous()
            right = self.parse_unary()
            left = Binary(left, operator, right)
        return left

    def parse_unary(self) -> Expr:
        """Unary = ( '!' | '-' ) Unary | Call"""
        if self.match(TK_BANG, TK_MINUS):
            operator = self.previous()
            right = self.parse_unary()
            return Unary(operator, right)
        return self.parse_call()

    def parse_call(self) -> Expr:
        """Call = Primary ( '(' Arguments? ')' )*"""
        expr = self.parse_primary()
        while self.match(TK_LEFT_PAREN):
            expr = self.finish_call(expr)
        return expr

    def finish_call(self, callee: Expr) -> Call:
        args: list[Expr] = []
        if not self.at(TK_RIGHT_PAREN):
            while True:
                if len(args) >= MAX_ARGS:
                    self.error(
                        self.current(),
                        "Can't have more than " + str(MAX_ARGS) + " arguments.",
                    )
                args.append(self.parse_expr())
                if not self.match(TK_COMMA):
                    break
        paren = self.expect(TK_RIGHT_PAREN, "Expect ')' after arguments.")
        return Call(callee, paren, tuple(args))

    def parse_primary(self) -> Expr:
        """Parse a primary expression."""
        if self.match("false"):
            return Literal(False)
        if self.match("true"):
            return Literal(True)
        if self.match("nil"):
            return Literal(None)
        if self.match(TK_NUMBER, TK_STRING):
            return Literal(self.previous().literal)
        if self.match(TK_IDENT):
            return Variable(self.previous())
        if self.match(TK_LEFT_PAREN):
            expr = self.parse_expr()
            self.expect(TK_RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expr)
        raise self.error(self.current(), "Expect expression.")
