"""
Positions kept in a YAML file (list of mappings). Upsert by id; the whole
file is rewritten on every save, through a temp file and an atomic rename.
Saves from one store instance are serialized; across processes the last
write wins.
"""

from __future__ import annotations
import asyncio
import logging
import os
import tempfile
import threading
from dataclasses import asdict, fields
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, List

import yaml

from equity_bot.core.errors import PersistenceError
from equity_bot.core.types import DailySnapshot, Position, PositionStatus
from equity_bot.execution.base import PositionStore

logger = logging.getLogger("equity_bot.execution.yaml_store")

_DATETIME_FIELDS = ("entry_date", "created_at", "last_updated")


def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        dt = datetime.fromisoformat(str(value))
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def position_to_dict(position: Position) -> dict:
    data = asdict(position)
    data["status"] = position.status.value
    for key in _DATETIME_FIELDS:
        data[key] = getattr(position, key).isoformat()
    data["daily_snapshots"] = [
        {**asdict(s), "date": s.date.isoformat()} for s in position.daily_snapshots
    ]
    return data


def position_from_dict(data: dict) -> Position:
    known = {f.name for f in fields(Position)}
    kwargs = {k: v for k, v in data.items() if k in known}
    kwargs["status"] = PositionStatus(kwargs.get("status", PositionStatus.OPEN.value))
    for key in _DATETIME_FIELDS:
        if kwargs.get(key) is not None:
            kwargs[key] = _to_datetime(kwargs[key])
        else:
            kwargs.pop(key, None)
    kwargs["daily_snapshots"] = [
        DailySnapshot(**{**s, "date": _to_datetime(s["date"])}) for s in kwargs.get("daily_snapshots") or []
    ]
    return Position(**kwargs)


class YamlPositionStore(PositionStore):
    """PositionStore over a single YAML file."""

    def __init__(self, path: Path):
        self.path = Path(path)
        # guards read-modify-write; saves run concurrently in worker threads
        self._lock = threading.Lock()

    def _read(self) -> List[Position]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f) or []
            return [position_from_dict(item) for item in raw]
        except (OSError, yaml.YAMLError, TypeError, ValueError) as e:
            raise PersistenceError(f"Cannot read positions from {self.path}: {e}") from e

    def _write(self, positions: List[Position]) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump([position_to_dict(p) for p in positions], f, sort_keys=False)
            os.replace(tmp_name, self.path)
        except (OSError, yaml.YAMLError) as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Cannot write positions to {self.path}: {e}") from e

    def load_all(self) -> List[Position]:
        with self._lock:
            return self._read()

    def _upsert(self, position: Position) -> None:
        with self._lock:
            positions = self._read()
            for i, existing in enumerate(positions):
                if existing.id == position.id:
                    positions[i] = position
                    break
            else:
                positions.append(position)
            self._write(positions)

    async def get_open_positions(self) -> List[Position]:
        positions = await asyncio.to_thread(self.load_all)
        return [p for p in positions if p.status == PositionStatus.OPEN]

    async def save(self, position: Position) -> Position:
        await asyncio.to_thread(self._upsert, position)
        logger.debug("Saved position %s (%s)", position.symbol, position.id)
        return position
