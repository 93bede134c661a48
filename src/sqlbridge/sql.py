"""
SQL tokenization for template rewriting.

Every rewrite in this package is a textual substitution. To keep those
substitutions away from text that only looks like SQL, a template is split
once into segments:

    SQL → Tokenize → [code | string | identifier | comment, ...]

Only `code` segments are ever rewritten. String literals, double-quoted
identifiers and comments are passed through byte for byte (MySQL identifier
quoting being the one deliberate exception, see `sqlbridge.idioms`).

Main entry points:
- `tokenize_sql(sql)` - split into segments
- `mask_literals(sql)` - same-length copy with non-code text blanked, for
  position searches that must ignore literals
"""
import re
from dataclasses import dataclass
from enum import Enum, auto

PLACEHOLDER = '?'

# =============================================================================
# Data Structures
# =============================================================================


class TokenType(Enum):
    """Segment types identified during SQL tokenization."""
    CODE = auto()
    STRING_LITERAL = auto()
    QUOTED_IDENTIFIER = auto()
    COMMENT = auto()


@dataclass(slots=True)
class Token:
    """Segment from SQL tokenization."""
    type: TokenType
    text: str
    start: int
    end: int

    @property
    def is_code(self) -> bool:
        return self.type == TokenType.CODE


# Master tokenization pattern - one scan captures every non-code segment.
# Unterminated quotes do not match and stay in the surrounding code.
_TOKENIZE = re.compile(r"""
    (?P<string>'(?:[^']|'')*')
    |(?P<ident>"(?:[^"]|"")*")
    |(?P<line_comment>--[^\n]*)
    |(?P<block_comment>/\*.*?\*/)
""", re.VERBOSE | re.DOTALL)

_MASK_CHAR = '\0'


# =============================================================================
# Core Functions
# =============================================================================

def tokenize_sql(sql: str) -> list[Token]:
    """Split SQL into code and non-code segments in a single pass.

    Parameters
        sql: SQL query string

    Returns
        List of tokens preserving all SQL text; joining their text gives
        back the input exactly
    """
    tokens = []
    last_end = 0

    for match in _TOKENIZE.finditer(sql):
        start, end = match.span()

        if start > last_end:
            tokens.append(Token(TokenType.CODE, sql[last_end:start], last_end, start))

        if match.group('string'):
            ttype = TokenType.STRING_LITERAL
        elif match.group('ident'):
            ttype = TokenType.QUOTED_IDENTIFIER
        else:
            ttype = TokenType.COMMENT

        tokens.append(Token(ttype, match.group(0), start, end))
        last_end = end

    if last_end < len(sql):
        tokens.append(Token(TokenType.CODE, sql[last_end:], last_end, len(sql)))

    return tokens


def mask_literals(sql: str) -> str:
    """Return a copy of `sql` with every non-code character blanked.

    The result has the same length as the input, so match positions found in
    the mask are valid positions in the original text.
    """
    return ''.join(
        token.text if token.is_code else _MASK_CHAR * len(token.text)
        for token in tokenize_sql(sql)
    )


def make_placeholders(count: int) -> str:
    """Comma separated generic placeholders, e.g. `?, ?, ?`.
    """
    return ', '.join([PLACEHOLDER] * count)
