"""
Usage record loading.

Reads JSON or YAML record files and validates each entry before it
reaches the query pipeline.
"""

import json
import logging
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .models import normalize_timestamp, Provider, UsageRecord

logger = logging.getLogger(__name__)

# Accepted spellings for each record field; camelCase matches exported dashboards.
FIELD_ALIASES: Dict[str, str] = {
    "id": "id",
    "model": "model",
    "provider": "provider",
    "input": "input",
    "output": "output",
    "input_tokens": "input_tokens",
    "inputTokens": "input_tokens",
    "output_tokens": "output_tokens",
    "outputTokens": "output_tokens",
    "cost": "cost",
    "timestamp": "timestamp",
    "response_time": "response_time",
    "responseTime": "response_time",
    "model_version": "model_version",
    "modelVersion": "model_version",
}

REQUIRED_FIELDS = {
    "id", "model", "provider", "input", "output", "input_tokens",
    "output_tokens", "cost", "timestamp", "response_time",
}


def parse_timestamp(value: Any, label: str = "'timestamp'") -> datetime:
    """Parse an ISO-8601 string, datetime, date, or epoch-milliseconds number.

    A bare date (as YAML loads ``2024-01-01``) means midnight of that day.

    Raises:
        ValueError: If the value cannot be interpreted as a point in time
    """
    if isinstance(value, datetime):
        return normalize_timestamp(value)
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, bool):
        raise ValueError(f"{label} must be an ISO-8601 string or epoch milliseconds")
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).replace(tzinfo=None)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return normalize_timestamp(datetime.fromisoformat(text))
        except ValueError:
            raise ValueError(f"{label} is not a valid ISO-8601 timestamp: {value!r}")
    raise ValueError(f"{label} must be an ISO-8601 string or epoch milliseconds")


def _require_str(data: Dict[str, Any], key: str, where: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"'{key}' in {where} must be a string")
    return value


def _require_number(data: Dict[str, Any], key: str, where: str) -> float:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"'{key}' in {where} must be a number")
    if value < 0:
        raise ValueError(f"'{key}' in {where} cannot be negative")
    return float(value)


def _require_int(data: Dict[str, Any], key: str, where: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"'{key}' in {where} must be an integer")
    if value < 0:
        raise ValueError(f"'{key}' in {where} cannot be negative")
    return value


def parse_record(data: Any, index: int = 0) -> UsageRecord:
    """Validate one raw mapping and build a ``UsageRecord``.

    Args:
        data: Raw mapping loaded from JSON or YAML
        index: Position of the record in its file, for error messages

    Returns:
        Validated UsageRecord

    Raises:
        ValueError: If keys are unknown or missing, or values are invalid
    """
    where = f"record {index}"
    if not isinstance(data, dict):
        raise ValueError(f"{where} must be a dictionary")

    unknown_keys = set(data.keys()) - set(FIELD_ALIASES)
    if unknown_keys:
        raise ValueError(f"Unknown keys in {where}: {unknown_keys}")

    fields: Dict[str, Any] = {}
    for raw_key, value in data.items():
        name = FIELD_ALIASES[raw_key]
        if name in fields:
            raise ValueError(f"Duplicate field '{name}' in {where}")
        fields[name] = value

    missing = REQUIRED_FIELDS - set(fields)
    if missing:
        raise ValueError(f"Missing required keys in {where}: {sorted(missing)}")

    provider_value = _require_str(fields, "provider", where)
    try:
        provider = Provider(provider_value.lower())
    except ValueError:
        valid_providers = [p.value for p in Provider]
        raise ValueError(f"'provider' in {where} must be one of: {valid_providers}")

    model_version = fields.get("model_version")
    if model_version is not None and not isinstance(model_version, str):
        raise ValueError(f"'model_version' in {where} must be a string")

    return UsageRecord(
        id=str(fields["id"]),
        model=_require_str(fields, "model", where),
        provider=provider,
        input=_require_str(fields, "input", where),
        output=_require_str(fields, "output", where),
        input_tokens=_require_int(fields, "input_tokens", where),
        output_tokens=_require_int(fields, "output_tokens", where),
        cost=_require_number(fields, "cost", where),
        timestamp=parse_timestamp(fields["timestamp"], f"'timestamp' in {where}"),
        response_time=_require_number(fields, "response_time", where),
        model_version=model_version
    )


def load_records(path: str) -> List[UsageRecord]:
    """Load and validate usage records from a JSON or YAML file.

    The file holds either a list of records or a mapping with a
    ``records`` list.

    Args:
        path: Path to a .json, .yaml or .yml file

    Returns:
        Records in file order

    Raises:
        FileNotFoundError: If the file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If JSON is invalid or any record fails validation
    """
    records_path = Path(path)
    if not records_path.exists():
        raise FileNotFoundError(f"Records file not found: {path}")

    with open(records_path, 'r', encoding='utf-8') as f:
        if records_path.suffix.lower() == ".json":
            try:
                raw = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in records file {path}: {e}")
        else:
            try:
                raw = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise yaml.YAMLError(f"Invalid YAML in records file {path}: {e}")

    if raw is None:
        return []
    if isinstance(raw, dict):
        unknown_keys = set(raw.keys()) - {"records"}
        if unknown_keys:
            raise ValueError(f"Unknown keys in records file: {unknown_keys}")
        raw = raw.get("records") or []
    if not isinstance(raw, list):
        raise ValueError("Records file must contain a list of records")

    records = [parse_record(item, i) for i, item in enumerate(raw)]
    logger.debug("Loaded %d records from %s", len(records), path)
    return records
