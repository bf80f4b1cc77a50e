"""Lexer for the schema DSL.

Punctuation reaches the grammar as ply literals. Everything else is a NAME,
a NUMBER (an enum discriminant) or a LABEL, the double-quoted text that
replaces a variant's or field's name in lookups and headers. Labels have no
escapes and cannot span lines or be empty.
"""

import ply.lex as lex

KEYWORDS = {
    "define": "DEFINE",
    "as": "AS",
    "enum": "ENUM",
}


def column(data: str, lexpos: int) -> int:
    """Return the 1-based column of position ``lexpos`` in ``data``."""
    return lexpos - data.rfind("\n", 0, lexpos)


class TypeLexer:
    """Splits schema text into tokens, tracking line numbers for error messages."""

    tokens = ["NAME", "NUMBER", "LABEL"] + list(KEYWORDS.values())
    literals = "{}:,="

    t_ignore = " \t\r"
    t_ignore_COMMENT = r"\#[^\n]*"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore
        self.data = ""

    def t_LABEL(self, t: lex.LexToken) -> lex.LexToken:
        r'"[^"\n]*"'
        t.value = t.value[1:-1]
        if not t.value:
            raise self.error_at("Empty label", t.lineno, t.lexpos)
        return t

    def t_NUMBER(self, t: lex.LexToken) -> lex.LexToken:
        r"-?\d+"
        t.value = int(t.value)
        return t

    def t_NAME(self, t: lex.LexToken) -> lex.LexToken:
        r"[A-Za-z_][A-Za-z0-9_]*"
        t.type = KEYWORDS.get(t.value, "NAME")
        return t

    def t_newline(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        if t.value[0] == '"':
            raise self.error_at("Unterminated label", t.lineno, t.lexpos)
        raise self.error_at(f"Unexpected character {t.value[0]!r}", t.lineno, t.lexpos)

    def error_at(self, message: str, lineno: int, lexpos: int) -> SyntaxError:
        """Build a SyntaxError pointing at a position of the current input."""
        return SyntaxError(
            f"{message} at line {lineno}, column {column(self.data, lexpos)}"
        )

    def build(self, **kwargs) -> None:  # type: ignore
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        self.data = data
        self.lexer.lineno = 1
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize a whole schema."""
        self.input(data)
        return list(iter(self.token, None))
