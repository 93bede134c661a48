"""
Placeholder renumbering.

Templates always use the generic `?` placeholder. Backends with positional
parameters (`$1` for PostgreSQL, `:1` for Oracle) get each placeholder
replaced by the prefix and an increasing 1-based index. For those backends a
doubled `??` in code is an escaped literal question mark (e.g. the PostgreSQL
jsonb `?` operator) and is emitted as a single `?` without consuming an
index. Backends without a prefix bind `?` in place, so the text is returned
unchanged, `??` included.
"""
from sqlbridge.sql import PLACEHOLDER, tokenize_sql

_ESCAPED = PLACEHOLDER * 2


def _renumber_code(text: str, prefix: str, index: int) -> tuple[str, int]:
    """Renumber one code segment starting at `index`.

    Returns
        Tuple of (rewritten text, next index)
    """
    parts = []
    pos = 0
    while True:
        idx = text.find(PLACEHOLDER, pos)
        if idx < 0:
            parts.append(text[pos:])
            break
        parts.append(text[pos:idx])
        if text.startswith(_ESCAPED, idx):
            parts.append(PLACEHOLDER)
            pos = idx + 2
            continue
        parts.append(f'{prefix}{index}')
        index += 1
        pos = idx + 1
    return ''.join(parts), index


def renumber_placeholders(sql: str, prefix: str) -> str:
    """Replace generic placeholders with `prefix` + position.

    Parameters
        sql: SQL with generic `?` placeholders
        prefix: Positional prefix (`$`, `:`) or empty for in-place binding

    Returns
        SQL with numbered placeholders; identical to `sql` for an empty prefix
    """
    if not prefix or not sql or PLACEHOLDER not in sql:
        return sql

    parts = []
    index = 1
    for token in tokenize_sql(sql):
        if token.is_code:
            text, index = _renumber_code(token.text, prefix, index)
            parts.append(text)
        else:
            parts.append(token.text)
    return ''.join(parts)


def count_placeholders(sql: str, prefix: str = '') -> int:
    """Count bindable placeholders in code segments.

    With an empty prefix generic `?` markers are counted, otherwise numbered
    `prefix<n>` tokens.
    """
    if not sql:
        return 0
    count = 0
    for token in tokenize_sql(sql):
        if not token.is_code:
            continue
        if prefix:
            count += _count_numbered(token.text, prefix)
        else:
            count += token.text.count(PLACEHOLDER)
    return count


def _count_numbered(text: str, prefix: str) -> int:
    count = 0
    pos = text.find(prefix)
    while pos >= 0:
        end = pos + len(prefix)
        if end < len(text) and text[end].isdigit():
            count += 1
        pos = text.find(prefix, end)
    return count
