"""
Session Store

Serialises one encounter's state plus a write timestamp under a single key.

  - ``save`` never raises: write failures are logged and reported as False.
  - ``load`` never raises: unparsable or expired snapshots are discarded
    and None is returned so the caller starts from defaults.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from strokecode import config
from strokecode.core.timing import Clock, ensure_aware, utcnow
from strokecode.utils import get_logger
from .kv_ports import KeyValuePort

logger = get_logger(__name__)

SNAPSHOT_VERSION = 1


@dataclass(frozen=True)
class SessionSnapshot:
    written_at: datetime
    state: Dict[str, Any]

    def to_json(self) -> str:
        return json.dumps({
            "version": SNAPSHOT_VERSION,
            "written_at": self.written_at.isoformat(),
            "state": self.state,
        })

    @classmethod
    def from_json(cls, raw: str) -> "SessionSnapshot":
        data = json.loads(raw)
        if data["version"] != SNAPSHOT_VERSION:
            raise ValueError(f"Unsupported snapshot version: {data['version']}")
        return cls(
            written_at=ensure_aware(datetime.fromisoformat(data["written_at"])),
            state=dict(data["state"]),
        )


class SessionStore:
    def __init__(
        self,
        port: KeyValuePort,
        key: str,
        ttl_seconds: int = config.SESSION_TTL_SECONDS,
        clock: Clock = utcnow,
    ):
        self.port = port
        self.key = key
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock

    @classmethod
    def for_encounter(cls, port: KeyValuePort, encounter_id: str, **kwargs) -> "SessionStore":
        return cls(port, f"{config.SESSION_KEY_PREFIX}:{encounter_id}", **kwargs)

    def save(self, state: Dict[str, Any]) -> bool:
        snapshot = SessionSnapshot(written_at=self._clock(), state=state)
        try:
            self.port.set(self.key, snapshot.to_json())
        except Exception as e:
            logger.warning(f"Session write failed for {self.key}: {e}")
            return False
        return True

    def load_snapshot(self) -> Optional[SessionSnapshot]:
        try:
            raw = self.port.get(self.key)
        except Exception as e:
            logger.warning(f"Session read failed for {self.key}: {e}")
            return None
        if raw is None:
            return None
        try:
            snapshot = SessionSnapshot.from_json(raw)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Discarding corrupt session snapshot {self.key}: {e}")
            return None
        if self._clock() - snapshot.written_at > self.ttl:
            logger.info(f"Discarding expired session snapshot {self.key}")
            return None
        return snapshot

    def load(self) -> Optional[Dict[str, Any]]:
        snapshot = self.load_snapshot()
        return snapshot.state if snapshot else None

    def clear(self) -> None:
        try:
            self.port.remove(self.key)
        except Exception as e:
            logger.warning(f"Session remove failed for {self.key}: {e}")
