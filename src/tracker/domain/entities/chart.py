from dataclasses import dataclass, field
from datetime import datetime
from src.tracker.domain.entities.data_point import DataPoint

@dataclass
class Chart:
    id: int
    user_id: int
    name: str
    category: str
    created_at: datetime
    updated_at: datetime
    data_points: list[DataPoint] = field(default_factory=list)
