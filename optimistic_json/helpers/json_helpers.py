import json
from types import SimpleNamespace
from typing import Any


def to_record(data: dict) -> SimpleNamespace:
    """Turn a decoded JSON object into a fixed record, keys become attribute names."""
    return SimpleNamespace(**{str(key): value for key, value in data.items()})


def records_from(data: Any) -> Any:
    """Recursively convert every dict inside `data` into a record."""
    if isinstance(data, dict):
        return to_record({key: records_from(value) for key, value in data.items()})
    if isinstance(data, list):
        return [records_from(item) for item in data]
    return data


def json_loads(data: str, associative: bool = True) -> Any:
    return json.loads(data, object_hook=None if associative else to_record)


def json_dumps(data, indent=2) -> str:
    def safe_serializer(obj):
        if isinstance(obj, SimpleNamespace):
            return vars(obj)
        raise TypeError(f"Type {type(obj)} not serializable")

    return json.dumps(data, indent=indent, default=safe_serializer, ensure_ascii=False)
