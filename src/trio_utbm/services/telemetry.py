from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Mapping


@dataclass
class TelemetryService:
    """Append-only JSON-lines sink for engine events."""

    path: Path

    def log(self, event_type: str, payload: Mapping[str, object]) -> None:
        self._write([self._record(event_type, payload)])

    def log_events(self, events: Iterable[Mapping[str, object]]) -> None:
        """Write engine events, which carry their own "type" key."""
        recs = []
        for ev in events:
            payload = {k: v for k, v in ev.items() if k != "type"}
            recs.append(self._record(str(ev.get("type", "UNKNOWN")), payload))
        if recs:
            self._write(recs)

    def read_all(self) -> list[dict[str, object]]:
        if not self.path.exists():
            return []
        out: list[dict[str, object]] = []
        with self.path.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    out.append(json.loads(line))
        return out

    @staticmethod
    def _record(event_type: str, payload: Mapping[str, object]) -> dict[str, object]:
        return {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "type": event_type,
            "payload": dict(payload),
        }

    def _write(self, recs: list[dict[str, object]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            for rec in recs:
                f.write(json.dumps(rec, ensure_ascii=False) + "\n")
