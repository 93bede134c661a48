"""
Portable idiom rewriting.

Each dialect carries an ordered tuple of `IdiomRule` values. A rule is a
regular expression plus its native replacement and is applied to every
occurrence in the code segments of a template. There is no case
normalization: upper and lower case spellings are separate rules. Rules are
guarded (word boundaries, look-arounds) so that rewritten output never
matches again, which makes `rewrite_idioms` idempotent.
"""
import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlbridge.sql import TokenType, tokenize_sql

if TYPE_CHECKING:
    from sqlbridge.dialects.base import Dialect

logger = logging.getLogger(__name__)

_WORD_BEFORE = r'(?<![\w$.])'
_WORD_AFTER = r'(?![\w$])'


@dataclass(frozen=True, slots=True)
class IdiomRule:
    """One literal-idiom substitution."""
    name: str
    pattern: re.Pattern
    replacement: str

    def apply(self, text: str) -> str:
        return self.pattern.sub(lambda _: self.replacement, text)


def function_rule(name: str, spelling: str, replacement: str, *,
                  parens: bool = False, guard: str = '',
                  not_after: str = '') -> IdiomRule:
    """Rule replacing a current-instant function or keyword.

    Parameters
        name: Rule name used in debug logging
        spelling: Literal spelling to match, e.g. `now()` or `sysdate`
        replacement: Native spelling
        parens: Also swallow an optional `()` after the keyword
        guard: Negative lookahead body; the match is skipped when it follows
        not_after: Literal text that must not directly precede the match
    """
    regex = _WORD_BEFORE
    if not_after:
        regex += f'(?<!{re.escape(not_after)})'
    regex += re.escape(spelling)
    if parens:
        regex += r'(?:\(\))?'
    if spelling[-1].isalnum() or spelling[-1] == '_':
        regex += _WORD_AFTER
    if guard:
        regex += f'(?!{guard})'
    return IdiomRule(name, re.compile(regex), replacement)


def typed_literal_rule(keyword: str, replacement: str) -> IdiomRule:
    """Rule for a type keyword directly preceding a placeholder, e.g. `DATE ?`.

    An escaped `??` is not a placeholder and is left alone.
    """
    regex = _WORD_BEFORE + re.escape(keyword) + r'\s+\?(?!\?)'
    return IdiomRule(f'{keyword} ?', re.compile(regex), replacement)


def set_difference_rule(spelling: str, replacement: str) -> IdiomRule:
    """Rule for a whitespace-delimited set-difference keyword.
    """
    regex = r'(?<=\s)' + re.escape(spelling) + r'(?=\s)'
    return IdiomRule(spelling, re.compile(regex), replacement)


def typed_literal_rules(date: str, timestamp: str) -> tuple[IdiomRule, ...]:
    """`DATE ?` / `TIMESTAMP ?` rules in both cases. `{}` marks the placeholder.
    """
    date = date.replace('{}', '?')
    timestamp = timestamp.replace('{}', '?')
    return (
        typed_literal_rule('DATE', date),
        typed_literal_rule('TIMESTAMP', timestamp),
        typed_literal_rule('date', date),
        typed_literal_rule('timestamp', timestamp),
    )


def minus_to_except() -> tuple[IdiomRule, ...]:
    return set_difference_rule('MINUS', 'EXCEPT'), set_difference_rule('minus', 'except')


def except_to_minus() -> tuple[IdiomRule, ...]:
    return set_difference_rule('EXCEPT', 'MINUS'), set_difference_rule('except', 'minus')


def _backtick(identifier: str) -> str:
    """Convert a double-quoted identifier into MySQL backtick quoting."""
    name = identifier[1:-1].replace('""', '"')
    return '`' + name.replace('`', '``') + '`'


def apply_rules(text: str, rules: tuple[IdiomRule, ...]) -> str:
    """Apply `rules` in order to a piece of code text.
    """
    for rule in rules:
        rewritten = rule.apply(text)
        if rewritten != text:
            logger.debug(f'Idiom rule {rule.name!r} applied')
            text = rewritten
    return text


def rewrite_idioms(sql: str, dialect: 'Dialect') -> str:
    """Translate portable idioms into the dialect's native spelling.

    Parameters
        sql: Dialect-neutral SQL template
        dialect: Target dialect

    Returns
        SQL with idioms rewritten in code segments only
    """
    if not sql:
        return sql

    parts = []
    for token in tokenize_sql(sql):
        if token.is_code:
            parts.append(apply_rules(token.text, dialect.idioms))
        elif token.type == TokenType.QUOTED_IDENTIFIER and dialect.backtick_identifiers:
            parts.append(_backtick(token.text))
        else:
            parts.append(token.text)
    return ''.join(parts)
