# ============================================================
# TABLE RESOLUTION EXCEPTIONS
# ============================================================

class TableRollerError(Exception):
    """Base exception for table loading and resolution errors"""
    pass


class TableNotFoundError(TableRollerError, LookupError):
    """No backing data exists for a table name"""

    def __init__(self, table_name: str):
        super().__init__(f"Table not found: {table_name}")
        self.table_name = table_name


class InvalidTableError(TableRollerError):
    """Table data was read but failed Pydantic validation"""
    pass


class EmptyTableError(TableRollerError, ValueError):
    """A selection was attempted on a list with no positive weight"""
    pass


class CycleOrTooDeepError(TableRollerError):
    """Table references nest deeper than the recursion cap (usually a cycle)"""

    def __init__(self, breadcrumb: tuple[str, ...], max_depth: int):
        path = " > ".join(breadcrumb)
        super().__init__(f"Table references exceed depth {max_depth}: {path}")
        self.breadcrumb = breadcrumb
        self.max_depth = max_depth
