"""
Row scanning into records.

    cursor row → binding plan (cached per record type and column list)
               → primitive conversion → temporal correction → record

Result columns are matched to record fields by their declared `column()`
name. Matching is case-insensitive, except that quoted declarations match
case-sensitively on backends returning quoted identifiers verbatim (Oracle).
Columns without a matching field are discarded, as are index-only columns
such as the synthetic `rnumignore` row number added by ROWNUM paging.

Every temporal value leaving the scanner is a timezone-aware UTC instant;
how it gets there depends on the dialect's `TemporalPolicy`.
"""
import datetime
import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import Any, TypeVar

from sqlbridge.cache import PlanCache
from sqlbridge.dialects import Dialect, TemporalPolicy, get_dialect
from sqlbridge.exceptions import ColumnBindFailure
from sqlbridge.records import FieldBinding, field_bindings
from sqlbridge.types import UTC, ZERO_TIME, NullTime, TypeConverter
from sqlbridge.types import parse_text_timestamp, reinterpret_utc, to_utc

logger = logging.getLogger(__name__)

R = TypeVar('R')

Plan = tuple[FieldBinding | None, ...]


def cursor_columns(cursor: Any) -> list[str]:
    """Column names from a DB-API cursor description."""
    if not cursor.description:
        return []
    return [desc[0] for desc in cursor.description]


def correct_temporal(value: Any, policy: TemporalPolicy) -> datetime.datetime | None:
    """Turn a driver temporal value into a UTC instant.

    Returns
        UTC instant, or None when text matches no known format
    """
    if isinstance(value, str | bytes):
        if policy != TemporalPolicy.PARSE_TEXT:
            raise TypeError(f'unexpected text value {value!r} for a timestamp')
        return parse_text_timestamp(value)

    if isinstance(value, datetime.datetime):
        if policy == TemporalPolicy.REINTERPRET_UTC:
            return reinterpret_utc(value)
        return to_utc(value)

    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time(), tzinfo=UTC)

    raise TypeError(f'unsupported conversion from {type(value).__name__} to datetime')


class Scanner:
    """Binds result rows into record instances for one dialect.

    Binding plans are cached per `(record type, column names)`. One scanner
    should serve one active cursor at a time.
    """

    def __init__(self, dialect: Dialect | str, maxsize: int = 128) -> None:
        self.dialect = get_dialect(dialect)
        self._plans = PlanCache(maxsize)

    def scan(self, cursor: Any, dest: R) -> bool:
        """Fetch the next row from `cursor` into `dest`.

        Returns
            False when the cursor is exhausted, `dest` untouched
        """
        row = cursor.fetchone()
        if row is None:
            return False
        self.scan_row(cursor_columns(cursor), row, dest)
        return True

    def records(self, cursor: Any, record_type: type[R]) -> Iterator[R]:
        """Yield a new `record_type` instance per remaining row."""
        columns = cursor_columns(cursor)
        while (row := cursor.fetchone()) is not None:
            yield self.scan_row(columns, row, record_type())

    def scan_row(self, columns: Sequence[str], row: Sequence[Any] | Mapping[str, Any], dest: R) -> R:
        """Bind an already fetched row into `dest`.

        Raises
            ColumnBindFailure: If a column value cannot be stored in its field
        """
        if isinstance(row, Mapping):
            values = [row[name] for name in columns]
        else:
            values = row

        plan = self._plan(type(dest), tuple(columns))
        for binding, value in zip(plan, values):
            if binding is None:
                continue
            try:
                binding.bind(dest, self._convert(binding, value))
            except (TypeError, ValueError) as err:
                raise ColumnBindFailure(binding.column_name, binding.field_name, str(err)) from err
        return dest

    def clear(self) -> None:
        """Drop cached binding plans."""
        self._plans.clear()

    def _plan(self, record_type: type, columns: tuple[str, ...]) -> Plan:
        return self._plans.get_or_build((record_type, columns),
                                        lambda: self.build_plan(record_type, columns))

    def build_plan(self, record_type: type, columns: Sequence[str]) -> Plan:
        """Field binding per column position, None for discarded columns.
        """
        exact: dict[str, FieldBinding] = {}
        folded: dict[str, FieldBinding] = {}
        for binding in field_bindings(record_type):
            if binding.quoted and self.dialect.quoted_identifiers:
                exact.setdefault(binding.bare_name, binding)
            else:
                folded.setdefault(binding.bare_name.casefold(), binding)

        rownum = self.dialect.rownum_column
        plan = []
        for name in columns:
            if rownum and name.casefold() == rownum:
                plan.append(None)
                continue
            binding = exact.get(name) or folded.get(name.casefold())
            if binding is None or binding.index_only:
                plan.append(None)
                continue
            plan.append(binding)
        return tuple(plan)

    def _convert(self, binding: FieldBinding, value: Any) -> Any:
        if binding.target is NullTime:
            if value is None:
                return NullTime()
            return NullTime.of(self._instant(binding, value))

        if value is None:
            return None

        if binding.temporal:
            instant = self._instant(binding, value)
            return ZERO_TIME if instant is None else instant

        return TypeConverter.convert_value(value, binding.target)

    def _instant(self, binding: FieldBinding, value: Any) -> datetime.datetime | None:
        instant = correct_temporal(value, self.dialect.temporal)
        if instant is None:
            logger.debug(f'Column {binding.column_name!r}: unparseable temporal '
                         f'value {value!r}, using zero value')
        return instant
