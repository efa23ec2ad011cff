"""Table data model.

Tables are immutable value objects: ordered, uniquely named columns of equal
length, each holding cells of a single semantic type (None is missing).

Usage:
    from tidytab.table import Table

    table = Table.from_dict({"country": ["Brazil"], "cases": [37737]})
    table.column_types  # {"country": ColumnType.TEXT, "cases": ColumnType.INTEGER}
"""

from tidytab.table.models import (
    Cell,
    Column,
    ColumnNotFoundError,
    Table,
    TableError,
    format_cell,
    infer_value_type,
    type_of_value,
)

__all__ = [
    "Cell",
    "Column",
    "ColumnNotFoundError",
    "Table",
    "TableError",
    "format_cell",
    "infer_value_type",
    "type_of_value",
]
