"""Lexical analysis and parsing of lcalc statements. One statement is parsed per call; the result is a tree of
lcalc.pure.term nodes.

All grammar can be loosely defined as follows:

```
<stmt>   ::= "let" <ident> "=" <expr>           ; binds <ident> in the session, <expr> is not evaluated
           | <expr>                             ; reduced to normal form

<expr>   ::= <unary> <unary>*                   ; application, associating by left: a b c = ((a b) c)
<unary>  ::= "(" <expr> ")"
           | <ident>
           | <lambda>
<lambda> ::= ["λ" | "\"] <ident> <ident>* ("." | "->") <expr>
                                                ; λx y.M is sugar for λx.λy.M
                                                ; bodies are greedy: λx.x y = λx.(x y)
```

Identifiers are made of Unicode letters, digits, combining marks and connector punctuation; a "'" may follow the first
character, so that fresh names produced by alpha-conversion can be typed back in. "let" and "in" are keywords.

"$" and "in" are reserved for future syntax (application operator and let-in expressions): they are lexed, but no rule
above accepts them, and using one is reported as a reserved token.
"""

import unicodedata
from collections import namedtuple

from lcalc.lang.error import GenericException
from lcalc.pure.term import Abstraction, Application, Let, Location, Variable


class TokenType:
    LPAREN = "("
    RPAREN = ")"
    ARROW = "->"
    PERIOD = "."
    LAMBDA = "λ"
    EQUAL = "="
    DOLLAR = "$"
    LET = "let"
    IN = "in"
    IDENT = "<identifier>"
    EOF = "<end of input>"


Token = namedtuple("Token", ["type", "text", "loc"])

SINGLE_CHAR_TOKENS = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    ".": TokenType.PERIOD,
    "$": TokenType.DOLLAR,
    "=": TokenType.EQUAL,
    "\\": TokenType.LAMBDA,
    "λ": TokenType.LAMBDA,
}
KEYWORDS = {"let": TokenType.LET, "in": TokenType.IN}
RESERVED = {TokenType.DOLLAR, TokenType.IN}

IDENT_CATEGORIES = {"Lu", "Ll", "Lt", "Lm", "Lo", "Nd", "Mn", "Mc", "Me", "Pc"}


def is_ident_char(char, first=False):
    """Whether char may appear in an identifier (as its first character, if first)."""
    if char == "'":
        return not first
    return unicodedata.category(char) in IDENT_CATEGORIES


def lex(source):
    """Returns the list of Tokens in source, ending with an EOF token. Raises GenericException on invalid input."""
    tokens = []
    idx = 0

    while idx < len(source):
        char = source[idx]

        if char.isspace():
            idx += 1

        elif source.startswith("->", idx):
            tokens.append(Token(TokenType.ARROW, "->", Location(idx, 2)))
            idx += 2

        elif char in SINGLE_CHAR_TOKENS:
            tokens.append(Token(SINGLE_CHAR_TOKENS[char], char, Location(idx, 1)))
            idx += 1

        elif is_ident_char(char, first=True):
            end = idx + 1
            while end < len(source) and is_ident_char(source[end]):
                end += 1

            text = source[idx:end]
            tokens.append(Token(KEYWORDS.get(text, TokenType.IDENT), text, Location(idx, end - idx)))
            idx = end

        else:
            raise GenericException("'{}' contains invalid token '{}'", (source, char), start=idx, end=idx + 1)

    tokens.append(Token(TokenType.EOF, "", Location(len(source), 0)))
    return tokens


class Parser:
    """Recursive-descent parser over the tokens of a single statement."""

    def __init__(self, source):
        self.source = source
        self.tokens = lex(source)
        self.pos = 0

    def peek(self):
        return self.tokens[self.pos]

    def pop(self):
        token = self.tokens[self.pos]
        if token.type != TokenType.EOF:
            self.pos += 1
        return token

    def error(self, msg, token, *exprs):
        """Returns GenericException with msg about self.source, underlining token."""
        end = token.loc.end if token.loc.length else token.loc.begin + 1
        return GenericException(msg, (self.source, *exprs), start=token.loc.begin, end=end)

    @staticmethod
    def describe(token):
        return "end of input" if token.type == TokenType.EOF else token.text

    def parse(self):
        """Parses self.source as one statement."""
        stmt = self.parse_stmt()

        if self.peek().type != TokenType.EOF:
            raise self.error("'{}' has junk at end of expression: '{}'", self.peek(), self.peek().text)
        return stmt

    def parse_stmt(self):
        if self.peek().type == TokenType.LET:
            return self.parse_let()
        return self.parse_expr()

    def parse_let(self):
        self.pop()  # let

        name = self.pop()
        if name.type != TokenType.IDENT:
            raise self.error("'{}' expects identifier after 'let', found '{}'", name, self.describe(name))

        equal = self.pop()
        if equal.type != TokenType.EQUAL:
            raise self.error("'{}' expects '=' after 'let {}', found '{}'", equal, name.text, self.describe(equal))

        value = self.parse_expr()
        return Let(name.text, value, name.loc)

    def parse_expr(self):
        lhs = self.parse_unary()

        while self.peek().type not in (TokenType.RPAREN, TokenType.EOF):
            rhs = self.parse_unary()
            lhs = Application(lhs, rhs, Location(lhs.loc.begin, rhs.loc.end - lhs.loc.begin))

        return lhs

    def parse_unary(self):
        token = self.peek()

        if token.type == TokenType.LPAREN:
            return self.parse_parenthesised()

        elif token.type == TokenType.IDENT:
            self.pop()
            return Variable(token.text, token.loc)

        elif token.type == TokenType.LAMBDA:
            return self.parse_lambda()

        elif token.type == TokenType.EOF:
            raise self.error("'{}' ends unexpectedly", token)

        elif token.type in RESERVED:
            raise self.error("'{}' uses '{}', which is reserved for future syntax", token, token.text)

        raise self.error("'{}' has unexpected token '{}'", token, token.text)

    def parse_parenthesised(self):
        open_paren = self.pop()
        expr = self.parse_expr()

        if self.pop().type != TokenType.RPAREN:
            raise self.error("'{}' has '(' without matching ')'", open_paren)

        # parentheses are part of the term's span, for diagnostics
        expr.loc = Location(open_paren.loc.begin, self.tokens[self.pos - 1].loc.end - open_paren.loc.begin)
        return expr

    def parse_lambda(self):
        """λ (or \\) is optional after the first parameter: λx y z.M is desugared here to λx.λy.λz.M."""
        begin = self.peek().loc.begin
        if self.peek().type == TokenType.LAMBDA:
            self.pop()

        param = self.pop()
        if param.type != TokenType.IDENT:
            raise self.error("'{}' expects identifier after 'λ', found '{}'", param, self.describe(param))

        token = self.peek()
        if token.type in (TokenType.PERIOD, TokenType.ARROW):
            self.pop()
            body = self.parse_expr()

        elif token.type == TokenType.IDENT:
            body = self.parse_lambda()

        else:
            raise self.error("'{}' expects '.' or '->' or identifier, found '{}'", token, self.describe(token))

        return Abstraction(param.text, body, Location(begin, body.loc.end - begin), param.loc)


def parse(source):
    """Parses a single lcalc statement. Raises GenericException if source is empty or not valid grammar."""
    if not source.strip():
        raise GenericException("λ-term cannot be empty", source)
    return Parser(source).parse()
