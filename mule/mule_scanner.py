"""
Hand-rolled scanner for request definition files.

The scanner turns raw text into a flat stream of tokens. Most of the
language is line oriented, so newlines are significant and collapse to a
single END_OF_LINE token, while spaces between tokens are not.

Strings come in several flavours:

  - `...` and "..." open an interpolated region. Inside it the scanner is in
    quoted mode and emits alternating STRING and VARIABLE tokens until the
    same sigil closes the region.
  - '...' is a raw string, read verbatim as one STRING token.
  - <<LABEL starts a heredoc that runs until a line equal to LABEL.

The scanner never raises: malformed input produces an INVALID token and the
caller decides what to do with it. END_OF_INPUT and INVALID are terminal.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from mule.mule_errors import LexError


class TokenKind(Enum):
    END_OF_INPUT = auto()
    END_OF_LINE = auto()
    QUOTE = auto()
    COMMENT = auto()
    IDENTIFIER = auto()
    KEYWORD = auto()
    MACRO = auto()
    VARIABLE = auto()
    STRING = auto()
    NUMBER = auto()
    DOT = auto()
    LEFT_BRACE = auto()
    RIGHT_BRACE = auto()
    INVALID = auto()


_LABELS = {
    TokenKind.END_OF_INPUT: "<eof>",
    TokenKind.END_OF_LINE: "<eol>",
    TokenKind.QUOTE: "<quote>",
    TokenKind.DOT: "<dot>",
    TokenKind.LEFT_BRACE: "<lbrace>",
    TokenKind.RIGHT_BRACE: "<rbrace>",
}

_PREFIXES = {
    TokenKind.COMMENT: "comment",
    TokenKind.IDENTIFIER: "identifier",
    TokenKind.KEYWORD: "keyword",
    TokenKind.MACRO: "macro",
    TokenKind.VARIABLE: "variable",
    TokenKind.STRING: "string",
    TokenKind.NUMBER: "number",
    TokenKind.INVALID: "invalid",
}


@dataclass(frozen=True)
class Token:
    """A classified lexical unit; line and column locate its first character."""
    type: TokenKind
    literal: str = ""
    line: int = 1
    column: int = 1

    @property
    def terminal(self) -> bool:
        return self.type in (TokenKind.END_OF_INPUT, TokenKind.INVALID)

    def __str__(self) -> str:
        label = _LABELS.get(self.type)
        if label is not None:
            return label
        return f"{_PREFIXES.get(self.type, 'unknown')}({self.literal})"


DEFAULT_KEYWORDS: Tuple[str, ...] = (
    # configuration block
    "username",
    "password",
    "token",
    "auth",
    "collection",
    "variables",
    "headers",
    "tls",
    "default",
    "query",
    "cookie",
    "before",
    "beforeAll",
    "beforeEach",
    "after",
    "afterAll",
    "afterEach",
    "url",
    "usage",
    "description",
    "body",
    "compress",
    "flow",
    "when",
    "exit",
    "goto",
    "set",
    "unset",
    "expect",
    # HTTP methods
    "do",
    "get",
    "post",
    "put",
    "delete",
    "patch",
)

_SPACE = " \t"
_NL = "\n\r"
_BLANK = _SPACE + _NL
_TEMPLATE = "`\""
_STRUCT = ".{}"
_IDENT_DELIMS = frozenset(_BLANK + _STRUCT + _TEMPLATE)

_BOM = b"\xef\xbb\xbf"


def _is_letter(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


def _is_name(ch: str) -> bool:
    return _is_letter(ch) or _is_digit(ch) or ch == "_"


def _decode(source: Union[str, bytes, bytearray]) -> str:
    # Anything after the first invalid UTF-8 sequence is treated as end of input.
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
        if data.startswith(_BOM):
            data = data[len(_BOM):]
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            return data[:e.start].decode("utf-8")
    text = str(source)
    if text.startswith("\ufeff"):
        text = text[1:]
    return text


class Scanner:
    """Produces tokens from one input, one `scan()` call at a time.

    A scanner is bound to a single input and mutated by every call; it is
    neither reusable nor safe to share between threads.
    """
    def __init__(self, source: Union[str, bytes, bytearray], keywords: Optional[Iterable[str]] = None):
        self.input = _decode(source)
        self.keywords = frozenset(DEFAULT_KEYWORDS if keywords is None else keywords)
        self.pos = 0
        self.line = 1
        self.column = 1
        self.quoted = False
        self._closer: Optional[str] = None
        self._buf: List[str] = []
        self._skip(_BLANK)

    # --- cursor ---

    @property
    def char(self) -> str:
        if self.pos < len(self.input):
            return self.input[self.pos]
        return ""

    def _peek(self) -> str:
        nxt = self.pos + 1
        if nxt < len(self.input):
            return self.input[nxt]
        return ""

    def _done(self) -> bool:
        return self.pos >= len(self.input)

    def _read(self):
        if self._done():
            return
        ch = self.input[self.pos]
        self.pos += 1
        if ch == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1

    def _write(self):
        self._buf.append(self.char)

    def _literal(self) -> str:
        return "".join(self._buf)

    def _skip(self, chars: str):
        while not self._done() and self.char in chars:
            self._read()

    def _eat_newline(self):
        if self.char == "\r":
            self._read()
        if self.char == "\n":
            self._read()

    # --- entry points ---

    def scan(self) -> Token:
        self._buf = []
        if not self.quoted:
            self._skip(_SPACE)
        line, column = self.line, self.column
        if self._done():
            # An interpolated region left open at end of input is malformed.
            kind = TokenKind.INVALID if self.quoted else TokenKind.END_OF_INPUT
            return Token(kind, "", line, column)
        if self.quoted:
            kind, literal = self._scan_quoted()
        else:
            kind, literal = self._dispatch()
        return Token(kind, literal, line, column)

    def __iter__(self) -> Iterator[Token]:
        while True:
            tok = self.scan()
            yield tok
            if tok.terminal:
                return

    # --- dispatch ---

    def _dispatch(self) -> Tuple[TokenKind, str]:
        ch = self.char
        match ch:
            case "@":
                return self._scan_macro()
            case "#":
                return self._scan_comment()
            case "." | "{" | "}":
                return self._scan_punct()
            case "\n" | "\r":
                return self._scan_newline()
            case "`" | '"':
                return self._scan_template()
            case "'":
                return self._scan_string()
            case "$":
                return self._scan_variable()
            case "<" if self._peek() == "<":
                return self._scan_heredoc()
            case _ if _is_digit(ch):
                return self._scan_number()
            case _ if _is_letter(ch):
                return self._scan_ident()
            case _:
                return self._scan_literal()

    def _scan_quoted(self) -> Tuple[TokenKind, str]:
        if self.char == "$":
            return self._scan_variable()
        if self.char == self._closer:
            return self._scan_template()
        return self._scan_verbatim()

    # --- token rules ---

    def _scan_macro(self) -> Tuple[TokenKind, str]:
        self._read()
        if not _is_letter(self.char):
            self._scan_run()
            return TokenKind.INVALID, self._literal()
        self._scan_run()
        return TokenKind.MACRO, self._literal()

    def _scan_comment(self) -> Tuple[TokenKind, str]:
        self._read()
        self._skip(_SPACE)
        while not self._done() and self.char not in _NL:
            self._write()
            self._read()
        # The comment line ends its statement; the newline run goes with it.
        self._skip(_BLANK)
        return TokenKind.COMMENT, self._literal().strip()

    def _scan_number(self) -> Tuple[TokenKind, str]:
        self._digits()
        if self.char == "." and _is_digit(self._peek()):
            self._write()
            self._read()
            self._digits()
        return TokenKind.NUMBER, self._literal()

    def _digits(self):
        while _is_digit(self.char):
            self._write()
            self._read()

    def _scan_punct(self) -> Tuple[TokenKind, str]:
        ch = self.char
        self._read()
        if ch == ".":
            return TokenKind.DOT, ""
        self._skip(_BLANK)
        if ch == "{":
            return TokenKind.LEFT_BRACE, ""
        return TokenKind.RIGHT_BRACE, ""

    def _scan_newline(self) -> Tuple[TokenKind, str]:
        self._skip(_BLANK)
        return TokenKind.END_OF_LINE, ""

    def _scan_template(self) -> Tuple[TokenKind, str]:
        ch = self.char
        self._read()
        if self.quoted:
            self.quoted = False
            self._closer = None
        else:
            self.quoted = True
            self._closer = ch
        return TokenKind.QUOTE, ""

    def _scan_string(self) -> Tuple[TokenKind, str]:
        self._read()
        while not self._done() and self.char != "'":
            self._write()
            self._read()
        if self._done():
            return TokenKind.INVALID, self._literal()
        self._read()
        return TokenKind.STRING, self._literal()

    def _scan_run(self):
        while not self._done() and self.char not in _IDENT_DELIMS:
            self._write()
            self._read()

    def _scan_ident(self) -> Tuple[TokenKind, str]:
        self._scan_run()
        literal = self._literal()
        if literal in self.keywords:
            return TokenKind.KEYWORD, literal
        return TokenKind.IDENTIFIER, literal

    def _scan_name(self) -> str:
        if not (_is_letter(self.char) or self.char == "_"):
            return ""
        while _is_name(self.char):
            self._write()
            self._read()
        return self._literal()

    def _scan_variable(self) -> Tuple[TokenKind, str]:
        self._read()
        if self.char != "{":
            name = self._scan_name()
            if not name:
                return TokenKind.INVALID, ""
            return TokenKind.VARIABLE, name
        self._read()
        name = self._scan_name()
        if not name or self.char != "}":
            return TokenKind.INVALID, name
        self._read()
        return TokenKind.VARIABLE, name

    def _scan_verbatim(self) -> Tuple[TokenKind, str]:
        while not self._done() and self.char != "$" and self.char != self._closer:
            self._write()
            self._read()
        return TokenKind.STRING, self._literal()

    def _scan_literal(self) -> Tuple[TokenKind, str]:
        while not self._done() and self.char not in _BLANK and self.char not in _TEMPLATE:
            self._write()
            self._read()
        return TokenKind.STRING, self._literal()

    def _read_line(self) -> str:
        self._buf = []
        while not self._done() and self.char not in _NL:
            self._write()
            self._read()
        self._eat_newline()
        return self._literal()

    def _scan_heredoc(self) -> Tuple[TokenKind, str]:
        self._read()
        self._read()
        while not self._done() and self.char not in _NL:
            self._write()
            self._read()
        label = self._literal().strip()
        if self._done() or not label:
            return TokenKind.INVALID, self._literal()
        self._eat_newline()

        body: List[str] = []
        while not self._done():
            line = self._read_line()
            if line.strip() == label:
                self._skip(_BLANK)
                return TokenKind.STRING, "".join(body)
            if not line.strip():
                continue
            body.append(line)
        return TokenKind.INVALID, "".join(body)


def tokenize(source: Union[str, bytes, bytearray], keywords: Optional[Iterable[str]] = None,
             *, strict: bool = False) -> List[Token]:
    """Scans source up to and including the first terminal token.

    With strict=True an INVALID token raises LexError instead of ending
    the list.
    """
    tokens = list(Scanner(source, keywords))
    if strict and tokens[-1].type is TokenKind.INVALID:
        raise LexError(tokens[-1])
    return tokens
