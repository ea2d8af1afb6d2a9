from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Mapping

from aoegwent.engine.state import Event


@dataclass
class TelemetryService:
    path: Path

    def log(self, event_type: str, payload: Mapping[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        rec = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "type": event_type,
            "payload": dict(payload),
        }
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")

    def subscriber(self, match_id: str) -> Callable[[Event], None]:
        """Return a match event callback that records each event with its match id."""

        def record(event: Event) -> None:
            payload = {k: v for k, v in event.items() if k != "type"}
            payload["match_id"] = match_id
            self.log(str(event.get("type", "UNKNOWN")), payload)

        return record
