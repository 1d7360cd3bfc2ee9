"""
Policy table: one rule per row, rule type followed by up to six fields.
"""

from typing import Optional

from sqlalchemy import Column, MetaData, String, Table

from casbin_sql_adapter.config import DEFAULT_TABLE_NAME


PTYPE_LENGTH = 10
FIELD_LENGTH = 256
MAX_FIELDS = 6

FIELD_COLUMNS = tuple(f"v{i}" for i in range(MAX_FIELDS))


def build_policy_table(
    table_name: str = DEFAULT_TABLE_NAME,
    metadata: Optional[MetaData] = None,
) -> Table:
    """Build the policy table definition.

    ptype VARCHAR(10), v0..v5 VARCHAR(256) NULL, no primary key. Trailing
    fields a rule does not have are stored as NULL.
    """
    if metadata is None:
        metadata = MetaData()

    return Table(
        table_name,
        metadata,
        Column("ptype", String(PTYPE_LENGTH)),
        *(Column(name, String(FIELD_LENGTH), nullable=True) for name in FIELD_COLUMNS),
    )
