"""Static catalog of bookable table types"""

from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel


class TableType(BaseModel):
    """A kind of table with its capacity bounds and hourly rate"""
    name: str
    capacity_min: int
    capacity_max: int
    price_per_hour: Decimal

    class Config:
        frozen = True

    def fits(self, num_people: int) -> bool:
        return self.capacity_min <= num_people <= self.capacity_max


TABLE_TYPES: List[TableType] = [
    TableType(name="Parasol", capacity_min=1, capacity_max=4, price_per_hour=Decimal("15.00")),
    TableType(name="Mini Cabane", capacity_min=1, capacity_max=5, price_per_hour=Decimal("25.00")),
    TableType(name="Cabane", capacity_min=6, capacity_max=20, price_per_hour=Decimal("35.00")),
]

_BY_NAME: Dict[str, TableType] = {table.name: table for table in TABLE_TYPES}


def get_table_types() -> List[TableType]:
    return list(TABLE_TYPES)


def get_table_type(name: str) -> Optional[TableType]:
    """Look up a table type by name, None when unknown"""
    return _BY_NAME.get(name)
