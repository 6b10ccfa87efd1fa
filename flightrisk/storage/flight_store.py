from __future__ import annotations

import json
import os
import tempfile
import threading
from typing import Iterable, List, Optional

import structlog
from pydantic import TypeAdapter, ValidationError

from flightrisk.models.evaluation import FlightEvaluation

logger = structlog.get_logger(__name__)

_HISTORY = TypeAdapter(List[FlightEvaluation])


class FlightStore:
    """
    Past evaluations as one JSON array on disk, most recent first.
    A missing or unreadable file is an empty history, never an error.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def load(self) -> List[FlightEvaluation]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as e:
            logger.warning("flight_history_unreadable", path=self.path, error=type(e).__name__)
            return []

        if not isinstance(raw, list):
            logger.warning("flight_history_unreadable", path=self.path, error="not a list")
            return []
        try:
            return _HISTORY.validate_python(raw)
        except ValidationError as e:
            logger.warning("flight_history_unreadable", path=self.path, error=f"{e.error_count()} invalid fields")
            return []

    def save(self, evaluations: Iterable[FlightEvaluation]) -> None:
        payload = _HISTORY.dump_json(list(evaluations), indent=2)
        directory = os.path.dirname(self.path) or "."
        os.makedirs(directory, exist_ok=True)

        # write-then-rename so readers never see half a file
        fd, tmp = tempfile.mkstemp(dir=directory, prefix=".flights-", suffix=".json")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp, self.path)
        except OSError:
            try:
                os.remove(tmp)
            except OSError:
                pass
            raise

    def record(self, evaluation: FlightEvaluation) -> List[FlightEvaluation]:
        with self._lock:
            history = [evaluation] + [e for e in self.load() if e.id != evaluation.id]
            self.save(history)
        return history

    def get(self, evaluation_id: str) -> Optional[FlightEvaluation]:
        for e in self.load():
            if e.id == evaluation_id:
                return e
        return None
