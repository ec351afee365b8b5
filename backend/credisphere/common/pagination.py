"""List query parameters and the SQL fragments built from them."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Query

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
# Keeps the page offset inside SQLite's 64-bit integers.
MAX_QUERY_INT = 2**31 - 1


def _positive_int(value: str | None, default: int) -> int:
    """Parse a query value leniently, falling back to the default."""
    if value is None:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if 1 <= parsed <= MAX_QUERY_INT else default


def parse_bool(value: str | None) -> bool | None:
    """Tri-state boolean filter: ``"true"``, ``"false"`` or unset."""
    if value == "true":
        return True
    if value == "false":
        return False
    return None


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass
class ListParams:
    """Common list query parameters.

    :param page: 1-based page number
    :param limit: Page size
    :param search: Case-insensitive substring filter
    :param sort_by: Client-side field name, mapped per resource
    :param sort_order: ``asc`` or ``desc``
    """

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    search: str = ""
    sort_by: str | None = None
    sort_order: str = "asc"

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def descending(self) -> bool:
        return self.sort_order == "desc"


def list_params(
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
    search: Annotated[str, Query()] = "",
    sort_by: Annotated[str | None, Query(alias="sortBy")] = None,
    sort_order: Annotated[str, Query(alias="sortOrder")] = "asc",
) -> ListParams:
    """FastAPI dependency reading the common list query parameters."""
    return ListParams(
        page=_positive_int(page, DEFAULT_PAGE),
        limit=_positive_int(limit, DEFAULT_LIMIT),
        search=search.strip(),
        sort_by=sort_by,
        sort_order="desc" if sort_order.lower() == "desc" else "asc",
    )


@dataclass
class ListQuery:
    """WHERE and ORDER BY clauses for a paged SELECT.

    Built by :meth:`build`; column names only ever come from the
    resource's own whitelists, values always travel as parameters.
    """

    where: str
    params: list[Any]
    order_by: str

    @classmethod
    def build(
        cls,
        options: ListParams,
        *,
        search_columns: Sequence[str],
        sort_columns: Mapping[str, str],
        default_sort: str,
        filters: Mapping[str, Any] | None = None,
        extra_conditions: Sequence[tuple[str, Sequence[Any]]] = (),
    ) -> "ListQuery":
        """Build the clauses for a list query.

        :param options: Parsed list parameters
        :param search_columns: Columns searched with ``LIKE``
        :param sort_columns: Client field name to column mapping
        :param default_sort: Column used when ``sortBy`` is missing or unknown
        :param filters: Equality filters; ``None`` values are skipped
        :param extra_conditions: Raw conditions with their parameters
        :return: ListQuery instance
        """
        conditions: list[str] = []
        params: list[Any] = []

        if options.search and search_columns:
            term = f"%{escape_like(options.search)}%"
            conditions.append(
                "("
                + " OR ".join(f"{column} LIKE ? ESCAPE '\\'" for column in search_columns)
                + ")",
            )
            params.extend(term for _ in search_columns)

        for column, value in (filters or {}).items():
            if value is None:
                continue
            conditions.append(f"{column} = ?")
            params.append(value)

        for condition, condition_params in extra_conditions:
            conditions.append(condition)
            params.extend(condition_params)

        where = " WHERE " + " AND ".join(conditions) if conditions else ""

        column = sort_columns.get(options.sort_by or "", default_sort)
        direction = "DESC" if options.descending else "ASC"
        order_by = f" ORDER BY {column} {direction}, id {direction}"

        return cls(where=where, params=params, order_by=order_by)
