"""Regnum Forum Archive — structured SELECT builder and thread filter compiler.

Every value reaches SQLite as a bound parameter. Clauses carry their own
parameters so the builder can emit them in statement order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from models import ThreadFilter

SEARCH_RESULT_CAP = 50


@dataclass
class Clause:
    sql: str
    params: tuple = ()


def _clause(sql, params) -> Clause:
    return sql if isinstance(sql, Clause) else Clause(sql, tuple(params))


@dataclass
class SelectQuery:
    source: Union[str, Clause]
    columns: List[Clause] = field(default_factory=list)
    joins: List[Clause] = field(default_factory=list)
    conditions: List[Clause] = field(default_factory=list)
    grouping: List[str] = field(default_factory=list)
    ordering: List[str] = field(default_factory=list)
    row_limit: Optional[int] = None
    row_offset: Optional[int] = None

    @classmethod
    def wrap(cls, inner: SelectQuery, alias: str = "sub") -> SelectQuery:
        """Select from ``inner`` as a derived table."""
        sql, params = inner.build()
        return cls(Clause(f"({sql}) {alias}", tuple(params)))

    def select(self, sql, *params) -> SelectQuery:
        self.columns.append(_clause(sql, params))
        return self

    def join(self, sql, *params) -> SelectQuery:
        self.joins.append(_clause(sql, params))
        return self

    def where(self, sql, *params) -> SelectQuery:
        self.conditions.append(_clause(sql, params))
        return self

    def where_all(self, clauses) -> SelectQuery:
        for clause in clauses:
            self.where(clause)
        return self

    def group_by(self, *columns: str) -> SelectQuery:
        self.grouping.extend(columns)
        return self

    def order_by(self, *terms: str) -> SelectQuery:
        self.ordering.extend(terms)
        return self

    def limit(self, limit: int, offset: Optional[int] = None) -> SelectQuery:
        self.row_limit = limit
        self.row_offset = offset
        return self

    def _body(self) -> Tuple[str, list]:
        params: list = []
        columns = self.columns or [Clause("*")]
        for c in columns:
            params.extend(c.params)
        source = _clause(self.source, ())
        params.extend(source.params)
        sql = f"SELECT {', '.join(c.sql for c in columns)} FROM {source.sql}"
        for j in self.joins:
            sql += f" {j.sql}"
            params.extend(j.params)
        if self.conditions:
            sql += " WHERE " + " AND ".join(f"({c.sql})" for c in self.conditions)
            for c in self.conditions:
                params.extend(c.params)
        if self.grouping:
            sql += " GROUP BY " + ", ".join(self.grouping)
        return sql, params

    def build(self) -> Tuple[str, list]:
        sql, params = self._body()
        if self.ordering:
            sql += " ORDER BY " + ", ".join(self.ordering)
        if self.row_limit is not None:
            sql += " LIMIT ?"
            params.append(self.row_limit)
            if self.row_offset:
                sql += " OFFSET ?"
                params.append(self.row_offset)
        return sql, params

    def build_count(self) -> Tuple[str, list]:
        """Count the rows the query would return, ignoring order and limit."""
        sql, params = self._body()
        return f"SELECT COUNT(*) AS total FROM ({sql})", params


def contains(column: str, text: str) -> Clause:
    return Clause(f"instr({column}, ?) > 0", (text,))


def icontains(column: str, text: str) -> Clause:
    return Clause(f"instr(casefold({column}), ?) > 0", (text.casefold(),))


def starts_with(column: str, prefix: str) -> Clause:
    return Clause(f"substr({column}, 1, length(?)) = ?", (prefix, prefix))


def ends_with(column: str, suffix: str) -> Clause:
    return Clause(f"substr({column}, -length(?)) = ?", (suffix, suffix))


def search_clause(term: str, alias: str = "t") -> Clause:
    """Thread name or any of the thread's posts contains ``term``."""
    needle = term.casefold()
    return Clause(
        f"instr(casefold({alias}.name), ?) > 0 OR EXISTS ("
        f"SELECT 1 FROM posts sp WHERE sp.thread_id = {alias}.id "
        f"AND instr(casefold(sp.message), ?) > 0)",
        (needle, needle),
    )


def compile_thread_filter(flt: ThreadFilter, alias: str = "t") -> List[Clause]:
    """Turn a :class:`ThreadFilter` into WHERE predicates against ``threads``."""
    clauses = []
    if flt.language:
        clauses.append(contains(f"{alias}.path", f"/{flt.language}/"))
    if flt.category:
        clauses.append(ends_with(f"{alias}.path", f"/{flt.category}"))
    if flt.search:
        clauses.append(search_clause(flt.search, alias))
    return clauses
