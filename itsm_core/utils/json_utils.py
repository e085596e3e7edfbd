import json
from datetime import date, datetime
from enum import Enum
from typing import Any


class EnhancedJSONEncoder(json.JSONEncoder):
    def default(self, obj):
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        elif isinstance(obj, Enum):
            return obj.value
        # Pydantic models
        elif hasattr(obj, "model_dump"):
            return obj.model_dump(mode="json")
        elif isinstance(obj, (set, frozenset)):
            return sorted(obj, key=str)
        return str(obj)


def dumps(obj: Any, **kwargs) -> str:
    """JSON dumps with datetime, enum and pydantic support."""
    return json.dumps(obj, cls=EnhancedJSONEncoder, **kwargs)
