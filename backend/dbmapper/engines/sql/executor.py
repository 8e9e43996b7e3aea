"""
Execute a BoundSql on a Transaction.

Resolves the positional values (additional parameters first, then the
caller's parameter object), rewrites ``?`` placeholders to the driver's
paramstyle and runs the statement on ``transaction.connection()``.

Returns list[dict] when the statement produces rows (SELECT, WITH,
... RETURNING), otherwise the rowcount.
"""

from typing import Any

from dbmapper.core.pool import cursor_to_dicts, execute
from dbmapper.mapping import BoundSql, resolve_parameter_values
from dbmapper.models import ProductTypeEnum
from dbmapper.transaction import Transaction

# DB-API paramstyle per product: qmark keeps "?", format needs "%s"
_FORMAT_PARAMSTYLE = frozenset({ProductTypeEnum.POSTGRES, ProductTypeEnum.MYSQL})


def _placeholder_positions(sql: str) -> list[int]:
    """Offsets of ``?`` placeholders, skipping quoted literals and comments.

    Handles single-quoted (``'...'``), double-quoted (``"..."``), dollar-quoted
    (``$$...$$``) literals and ``--`` / ``/* */`` comments.
    """
    positions: list[int] = []
    i = 0
    length = len(sql)

    while i < length:
        ch = sql[i]

        if ch in ("'", '"'):
            quote = ch
            i += 1
            while i < length:
                c = sql[i]
                if c == quote:
                    if i + 1 < length and sql[i + 1] == quote:
                        i += 2
                        continue
                    i += 1
                    break
                if c == "\\" and i + 1 < length:
                    i += 2
                    continue
                i += 1
            continue

        if ch == "$" and i + 1 < length and sql[i + 1] == "$":
            end = sql.find("$$", i + 2)
            i = length if end == -1 else end + 2
            continue

        if ch == "-" and i + 1 < length and sql[i + 1] == "-":
            end = sql.find("\n", i)
            i = length if end == -1 else end + 1
            continue

        if ch == "/" and i + 1 < length and sql[i + 1] == "*":
            end = sql.find("*/", i + 2)
            i = length if end == -1 else end + 2
            continue

        if ch == "?":
            positions.append(i)
        i += 1

    return positions


def to_paramstyle(sql: str, product_type: ProductTypeEnum) -> tuple[str, int]:
    """
    Rewrite ``?`` placeholders for *product_type*; return (sql, placeholder_count).

    psycopg and pymysql use ``%s`` and interpolate over the whole string, so
    literal ``%`` is doubled, but only when there is something to bind.
    """
    positions = _placeholder_positions(sql)
    if product_type not in _FORMAT_PARAMSTYLE or not positions:
        return sql, len(positions)

    marks = set(positions)
    out: list[str] = []
    for i, ch in enumerate(sql):
        if i in marks:
            out.append("%s")
        elif ch == "%":
            out.append("%%")
        else:
            out.append(ch)
    return "".join(out), len(positions)


def execute_bound_sql(
    transaction: Transaction,
    bound_sql: BoundSql,
    *,
    product_type: ProductTypeEnum,
) -> list[dict[str, Any]] | int:
    """
    Run *bound_sql* on *transaction*. Does not commit; the caller owns the
    transaction boundary (see transaction_scope).
    """
    values = resolve_parameter_values(bound_sql)
    sql, count = to_paramstyle(bound_sql.sql, product_type)
    if count != len(values):
        raise ValueError(
            f"SQL has {count} placeholder(s) but {len(values)} parameter mapping(s): {bound_sql.sql!r}"
        )

    conn = transaction.connection()
    cur = execute(
        conn,
        sql,
        values if values else None,
        product_type=product_type,
        timeout=transaction.timeout(),
    )
    try:
        if cur.description:
            return cursor_to_dicts(cur)
        return cur.rowcount if cur.rowcount is not None and cur.rowcount >= 0 else 0
    finally:
        cur.close()
