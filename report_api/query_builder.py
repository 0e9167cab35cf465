"""
Small SELECT builder for the route table.

SQL fragments (columns, sources, predicates, orderings) are always written in
code; every user-supplied value goes through ``where()`` and is bound as a
``%s`` positional parameter for psycopg2, never interpolated into the text.
"""

import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple


_ALIAS_RE = re.compile(r"\s+AS\s+(\w+)\s*$", re.IGNORECASE)


def output_name(column: str) -> str:
    """
    Name a select-list expression will have in the result set.

    ``"co.nome AS company_name"`` -> ``"company_name"``, ``"c.titulo"`` -> ``"titulo"``.
    """
    match = _ALIAS_RE.search(column)
    if match:
        return match.group(1)
    return column.strip().rsplit(".", 1)[-1]


@dataclass(frozen=True)
class Query:
    """A finished SQL statement with its bound parameters."""
    sql: str
    params: Tuple[Any, ...] = ()


@dataclass
class SelectQuery:
    """
    Accumulates a SELECT statement one clause at a time.

    Usage:
        q = SelectQuery(["c.id", "co.nome AS company_name"],
                        "campaigns c JOIN companies co ON co.id = c.company_id")
        q.where_company("co.nome", "acme").order_by("c.id DESC").limit(1)
        q.build()  # Query(sql=..., params=("acme", 1))
    """
    columns: Sequence[str]
    source: str
    conditions: List[str] = field(default_factory=list)
    params: List[Any] = field(default_factory=list)
    group_columns: List[str] = field(default_factory=list)
    order_columns: List[str] = field(default_factory=list)
    limit_value: Optional[int] = None
    window: Optional[Tuple[str, str]] = None

    def where(self, clause: str, *values: Any) -> "SelectQuery":
        """Append an AND predicate; ``values`` bind to its ``%s`` placeholders in order."""
        if clause.count("%s") != len(values):
            raise ValueError(
                f"Predicate {clause!r} has {clause.count('%s')} placeholders "
                f"but {len(values)} values"
            )
        self.conditions.append(clause)
        self.params.extend(values)
        return self

    def where_company(self, column: str, company: str) -> "SelectQuery":
        """Case-insensitive match on a company-name column."""
        return self.where(f"LOWER({column}) = LOWER(%s)", company)

    def group_by(self, *columns: str) -> "SelectQuery":
        self.group_columns.extend(columns)
        return self

    def order_by(self, *columns: str) -> "SelectQuery":
        self.order_columns.extend(columns)
        return self

    def limit(self, n: int) -> "SelectQuery":
        self.limit_value = int(n)
        return self

    def top_per_group(self, partition_by: str, order_by: str) -> "SelectQuery":
        """
        Keep only the first row of each partition.

        Wraps the statement in ``ROW_NUMBER() OVER (PARTITION BY ... ORDER BY ...)``
        and filters to rank 1, so ties are settled by ``order_by`` rather than
        by whatever order the planner produces.
        """
        self.window = (partition_by, order_by)
        return self

    def build(self) -> Query:
        select_list = list(self.columns)
        if self.window:
            partition_by, window_order = self.window
            select_list.append(
                f"ROW_NUMBER() OVER (PARTITION BY {partition_by} "
                f"ORDER BY {window_order}) AS group_rank"
            )

        sql = f"SELECT {', '.join(select_list)} FROM {self.source}"
        if self.conditions:
            sql += " WHERE " + " AND ".join(self.conditions)
        if self.group_columns:
            sql += " GROUP BY " + ", ".join(self.group_columns)

        if self.window:
            outer = ", ".join(output_name(c) for c in self.columns)
            sql = f"SELECT {outer} FROM ({sql}) ranked WHERE group_rank = 1"

        if self.order_columns:
            sql += " ORDER BY " + ", ".join(self.order_columns)

        params = list(self.params)
        if self.limit_value is not None:
            sql += " LIMIT %s"
            params.append(self.limit_value)

        return Query(sql=sql, params=tuple(params))
