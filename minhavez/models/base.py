"""Base model for Supabase rows."""
from typing import Dict, Any, Optional
from datetime import datetime


class SupabaseModel:
    """
    Base model for Supabase rows.

    Rows come back from PostgREST as plain dicts; models wrap them with
    attribute access and convert back for writes.
    """

    table_name: str = ""

    def __init__(self, **kwargs):
        """Initialize model with data."""
        for key, value in kwargs.items():
            setattr(self, key, value)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SupabaseModel':
        """Create model instance from dictionary."""
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {key: value for key, value in self.__dict__.items() if not key.startswith('_')}

    def to_supabase_dict(self) -> Dict[str, Any]:
        """Convert model to Supabase-compatible dictionary."""
        data = self.to_dict()
        # Convert datetime objects to ISO strings
        for key, value in data.items():
            if isinstance(value, datetime):
                data[key] = value.isoformat()
            elif hasattr(value, "value") and isinstance(getattr(value, "value"), str):
                data[key] = value.value
        return data


def parse_timestamp(value) -> Optional[datetime]:
    """Parse a PostgREST timestamp (ISO 8601, possibly with a trailing Z)."""
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
