"""
Tokenizer and variable expander for script lines.

A line is split on runs of whitespace. Single and double quotes may open
anywhere inside a token; whitespace inside a quoted span does not split and the
quote characters are removed. Nothing else is interpreted: backslashes are
plain characters, and '#' only starts a comment at the beginning of a line,
which is the parser's business, not ours.

Expansion happens on tokens after splitting:
    $NAME..., ${NAME}...            -> every reference substituted, marked literal
    param:$NAME..., param:${NAME}... -> "param:" + substituted value
Literal tokens are bound as values as-is; they are never re-read as
"param:value", so an expanded value may contain colons. Tokens holding a
single-quoted span are verbatim and never expanded ('$HOME' stays "$HOME").
"""
import os
import re
from typing import NamedTuple

from .faults import FaultCode, MalformedQuoteError, UnsetVariableWarning, getdoc, trigger

IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_]*"

QUALIFIED = re.compile(r"(?P<name>%s):(?P<value>.*)" % IDENTIFIER, re.DOTALL)
"""A "name:value" token; only the first colon separates."""

_VARIABLE = re.compile(r"\$(?:(?P<bare>%s)|\{(?P<braced>%s)\})" % (IDENTIFIER, IDENTIFIER))


class Token(NamedTuple):
    """
    One argument of a line, quotes already removed.

    - literal: produced by variable expansion; never read as "name:value".
    - verbatim: held a single-quoted span; never expanded.
    """

    text: str
    literal: bool = False
    verbatim: bool = False


def tokenize(line: str) -> list[Token]:
    """
    Split one raw line into tokens.

    Raises
    - MalformedQuoteError: a quote is opened and never closed.
    """
    tokens = []
    buffer = []
    quote = None
    started = verbatim = False
    opened = 0

    for position, char in enumerate(line):
        if quote is not None:
            if char == quote:
                quote = None
            else:
                buffer.append(char)
        elif char in "'\"":
            quote, opened, started = char, position, True
            verbatim = verbatim or char == "'"
        elif char.isspace():
            if started:
                tokens.append(Token("".join(buffer), verbatim=verbatim))
                buffer.clear()
                started = verbatim = False
        else:
            buffer.append(char)
            started = True

    if quote is not None:
        keyword = next(iter(line.split()), "")
        raise MalformedQuoteError(
            "unterminated quote in %r line" % keyword if keyword else "unterminated quote",
            title="malformed quote",
            code=FaultCode.MALFORMED_QUOTE,
            keyword=keyword,
            input=line,
            position=opened,
            reason="no closing %s" % quote,
            hint="close every ' or \" that opens an argument (for example: %s 'some value')" % (keyword or "OUTPUT"),
            docs=getdoc(FaultCode.MALFORMED_QUOTE),
        )
    if started:
        tokens.append(Token("".join(buffer), verbatim=verbatim))
    return tokens


def split(line: str) -> tuple[str, list[Token]]:
    """Tokenize a line and separate the command keyword from its arguments."""
    tokens = tokenize(line)
    if not tokens:
        raise ValueError("split() argument must contain a command keyword")
    return tokens[0].text, tokens[1:]


def _substitute(text, environ, keyword, report):
    def lookup(match):
        name = match["bare"] or match["braced"]
        try:
            return environ[name]
        except KeyError:
            report(UnsetVariableWarning(
                "variable %r is not set; it expands to an empty value" % name,
                title="unset variable",
                code=FaultCode.UNSET_VARIABLE,
                keyword=keyword,
                variable=name,
                hint="export %s before parsing or single-quote the argument to keep it verbatim" % name,
                docs=getdoc(FaultCode.UNSET_VARIABLE),
            ))
            return ""

    return _VARIABLE.sub(lookup, text)


def expand(tokens, /, environ=os.environ, *, keyword=None, report=trigger) -> list[Token]:
    """
    Expand environment references in tokens.

    Parameters
    - tokens: Token objects (see tokenize()) or plain strings, which are
      treated as unquoted.
    - environ: mapping read at call time; missing names expand to "".
    - keyword: command keyword, only used to give warnings context.
    - report: called with each UnsetVariableWarning (trigger() by default);
      the parser passes its own so warnings get the line number.
    """
    expanded = []
    for token in tokens:
        if isinstance(token, str):
            token = Token(token)
        if token.verbatim or token.literal:
            expanded.append(token)
        elif _VARIABLE.match(token.text):
            expanded.append(Token(_substitute(token.text, environ, keyword, report), literal=True))
        elif (qualified := QUALIFIED.fullmatch(token.text)) and _VARIABLE.match(qualified["value"]):
            value = _substitute(qualified["value"], environ, keyword, report)
            expanded.append(Token(qualified["name"] + ":" + value))
        else:
            expanded.append(token)
    return expanded


__all__ = (
    "Token",
    "tokenize",
    "split",
    "expand",
)
