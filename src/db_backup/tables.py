"""Table identity and FQN helpers shared by the incremental modules."""

from collections.abc import Iterable

from pydantic import BaseModel


def make_fqn(schema_name: str, name: str) -> str:
    """Build a fully-qualified ``schema.name`` identifier."""
    return f"{schema_name}.{name}"


class Table(BaseModel):
    """A relation selected for backup.

    Example:
        >>> Table(oid=16384, schema_name="public", name="orders").fqn
        'public.orders'
    """

    oid: int = 0
    schema_name: str
    name: str

    @property
    def fqn(self) -> str:
        return make_fqn(self.schema_name, self.name)


def table_fqns(tables: Iterable[Table]) -> list[str]:
    """FQNs of *tables*, in input order."""
    return [table.fqn for table in tables]


def fqn_index(tables: Iterable[Table]) -> frozenset[str]:
    """Build the FQN membership set for *tables* once per operation.

    Unlike a ``FilterSet``, an empty index contains nothing.
    """
    return frozenset(table.fqn for table in tables)
