# -*- coding: utf-8 -*-
"""Glycemia — dashboard snapshot (key-value store) and reading log (JSON files)."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from ..config import settings
from ..kvstore import KeyValueStore, get_json, get_store, set_json, user_key
from .models import GlycemicDailySummary, GlycemicReading, GlycemicReadingCreate, GlycemicValues, ReadingContext

logger = logging.getLogger(__name__)

GLYCEMIC_VALUES_KEY = "user_glycemic_values"
SNAPSHOT_MIN = 0
SNAPSHOT_MAX = 300


class SnapshotRangeError(ValueError):
    """A snapshot value falls outside SNAPSHOT_MIN..SNAPSHOT_MAX mg/dL."""

    def __init__(self, bound: str, limit: int) -> None:
        label = "Minimum" if bound == "min" else "Maximum"
        super().__init__(f"{label}: {limit} mg/dL")
        self.bound = bound
        self.limit = limit

    def to_dict(self) -> Dict[str, Any]:
        return {"reason": str(self), "bound": self.bound, "limit": self.limit, "unit": "mg/dL"}


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _data_root_for(user_id: str) -> Path:
    return settings.data_root / "users" / user_id / "glycemia"


def _date_prefix(iso8601: str) -> str:
    return (iso8601 or "")[:10]


# ---- snapshot ----


def get_values(user_id: str, store: Optional[KeyValueStore] = None) -> GlycemicValues:
    raw = get_json(store or get_store(), user_key(GLYCEMIC_VALUES_KEY, user_id))
    if not isinstance(raw, dict):
        return GlycemicValues()
    try:
        return GlycemicValues.model_validate(raw)
    except PydanticValidationError:
        logger.warning("Resetting invalid glycemic snapshot for user %s", user_id)
        return GlycemicValues()


def update_value(user_id: str, field: str, value: float, store: Optional[KeyValueStore] = None) -> GlycemicValues:
    """Set ``before_meal`` or ``after_meal``; values outside 0-300 mg/dL are rejected."""
    if field not in ("before_meal", "after_meal"):
        raise ValueError(f"Unknown glycemic field: {field}")
    if value < SNAPSHOT_MIN:
        raise SnapshotRangeError("min", SNAPSHOT_MIN)
    if value > SNAPSHOT_MAX:
        raise SnapshotRangeError("max", SNAPSHOT_MAX)

    store = store or get_store()
    values = get_values(user_id, store).model_copy(update={field: float(value)})
    set_json(store, user_key(GLYCEMIC_VALUES_KEY, user_id), values.model_dump())
    return values


# ---- reading log ----


def record_reading(
    user_id: str,
    request: GlycemicReadingCreate,
    *,
    data_root: Path | None = None,
    store: Optional[KeyValueStore] = None,
) -> GlycemicReading:
    now = _utc_now()
    reading = GlycemicReading(
        reading_id=str(uuid4()),
        created_at=now,
        measured_at=request.measured_at or now,
        value_mg_dl=request.value_mg_dl,
        context=request.context,
        notes=request.notes,
    )
    root = data_root or _data_root_for(user_id)
    root.mkdir(parents=True, exist_ok=True)
    fp = root / f"{reading.reading_id}.json"
    fp.write_text(reading.model_dump_json(indent=2), encoding="utf-8")

    if reading.context in (ReadingContext.before_meal, ReadingContext.after_meal) and (
        SNAPSHOT_MIN <= reading.value_mg_dl <= SNAPSHOT_MAX
    ):
        update_value(user_id, reading.context.value, reading.value_mg_dl, store=store)
    return reading


def _iter_readings(root: Path) -> List[GlycemicReading]:
    if not root.exists():
        return []
    readings: List[GlycemicReading] = []
    for fp in root.glob("*.json"):
        try:
            raw = json.loads(fp.read_text(encoding="utf-8"))
            readings.append(GlycemicReading.model_validate(raw))
        except (OSError, ValueError) as exc:
            logger.warning("Skipping unreadable reading %s: %s", fp.name, exc)
            continue
    return readings


def list_readings(
    user_id: str,
    *,
    start: Optional[str] = None,
    end: Optional[str] = None,
    data_root: Path | None = None,
) -> List[GlycemicReading]:
    readings = _iter_readings(data_root or _data_root_for(user_id))
    start_date = start or "0000-01-01"
    end_date = end or "9999-12-31"
    selected = [r for r in readings if start_date <= _date_prefix(r.measured_at) <= end_date]
    selected.sort(key=lambda r: r.measured_at, reverse=True)
    return selected


def delete_reading(user_id: str, reading_id: str, *, data_root: Path | None = None) -> bool:
    root = data_root or _data_root_for(user_id)
    fp = root / f"{reading_id}.json"
    # Reading ids are uuids; refuse anything that would escape the user directory.
    if fp.parent != root or not fp.exists():
        return False
    fp.unlink()
    return True


def daily_summary(
    user_id: str,
    *,
    start: str,
    end: str,
    data_root: Path | None = None,
    store: Optional[KeyValueStore] = None,
) -> Dict[str, Any]:
    target = get_values(user_id, store).max
    per_day: Dict[str, List[float]] = {}
    for reading in list_readings(user_id, start=start, end=end, data_root=data_root):
        per_day.setdefault(_date_prefix(reading.measured_at), []).append(reading.value_mg_dl)

    days: List[GlycemicDailySummary] = []
    for day in sorted(per_day.keys()):
        values = per_day[day]
        days.append(
            GlycemicDailySummary(
                date=day,
                min=min(values),
                max=max(values),
                avg=round(sum(values) / len(values), 1),
                count=len(values),
                above_target=sum(1 for v in values if v > target),
            )
        )
    return {"start": start, "end": end, "target_max": target, "days": days}
