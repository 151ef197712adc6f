from dataclasses import dataclass
from datetime import datetime

@dataclass(frozen=True)
class DataPoint:
    id: int
    chart_id: int
    measurement: float
    date: datetime
    name: str
    created_at: datetime
