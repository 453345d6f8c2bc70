"""
Exception types shared by the scanner, the expander, the authorization
engine and the response cache, plus helpers to render an error against
the source text it came from.
"""

from typing import Optional


class MuleError(Exception):
    """Base class for every error raised by mule."""
    pass


class NotDefined(MuleError):
    """An identifier is not bound anywhere in an environment chain."""
    def __init__(self, name: str):
        super().__init__(f"{name}: not defined")
        self.name = name


class ExpansionError(MuleError, ValueError):
    """Expanded text could not be coerced into the requested type."""
    def __init__(self, text: str, target: str, reason: Optional[str] = None):
        msg = f"{text!r}: invalid {target}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)
        self.text = text
        self.target = target


class TokenEncodingError(MuleError):
    """The JWT encoder rejected the claim set, the algorithm or the key."""
    pass


class CacheMiss(MuleError):
    """No usable cached value: absent, undecodable or expired. Recompute."""
    def __init__(self, key: str):
        super().__init__(f"{key}: cache miss")
        self.key = key


class StoreError(MuleError):
    """The persistent store under the cache failed. Not recoverable."""
    pass


class LexError(MuleError):
    """Raised by strict tokenizing when the scanner produced an invalid token."""
    def __init__(self, token):
        detail = f" near {token.literal!r}" if token.literal else ""
        super().__init__(f"invalid token{detail}")
        self.token = token


def source_context(source: str, line: int, col: Optional[int], radius: int = 2) -> str:
    """Excerpt of source around a scanner position.

    Positions follow the scanner: lines break on "\\n" only, a leading byte
    order mark is not part of line 1, and every character, tab included,
    counts as one column. The caret line repeats the tabs of the marked line
    so it stays aligned. End of input after a trailing newline sits on an
    empty last line.
    """
    if source.startswith("\ufeff"):
        source = source[1:]
    lines = [text.rstrip("\r") for text in source.split("\n")]
    if line < len(lines) and lines[-1] == "":
        lines.pop()
    if line < 1 or line > len(lines):
        return ""
    first = max(1, line - radius)
    last = min(len(lines), line + radius)
    width = len(str(last))
    out = []
    for number in range(first, last + 1):
        text = lines[number - 1]
        mark = ">" if number == line else " "
        out.append(f"{mark} {number:>{width}} | {text}")
        if number == line and col is not None:
            before = max(col - 1, 0)
            lead = "".join("\t" if c == "\t" else " " for c in text[:before])
            out.append(f"  {' ' * width} | {lead.ljust(before)}^")
    return "\n".join(out)


def format_error(message: str, source: Optional[str] = None,
                 line: Optional[int] = None, col: Optional[int] = None) -> str:
    """Formats an error message with line and column if available.

    When the source text is given, a few lines around the location are
    appended with a caret under the offending column.
    """
    msg = str(message or "Unknown error")
    if line is None:
        return msg
    col_info = f", col {col}" if col is not None else ""
    msg = f"Error on line {line}{col_info}: {msg}"
    if source:
        ctx = source_context(source, line, col)
        if ctx:
            msg = f"{msg}\n{ctx}"
    return msg


def format_token_error(message: str, token, source: Optional[str] = None) -> str:
    """Shortcut for errors attached to a scanner token."""
    return format_error(message, source, token.line, token.column)
