"""
Test history persistence.

History is a single JSON array of test results stored under one key, written
in full on every change and read in full once at startup. There is no
versioning: a stored value that cannot be parsed is logged and treated as an
empty history.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Protocol, Sequence, Union

from pydantic import TypeAdapter, ValidationError

from .models import TestResult

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_KEY = "terraform_prep_history"

_history_adapter = TypeAdapter(List[TestResult])


class HistoryStore(Protocol):
    """Persistence port for the test history (most recent result first)."""

    def load(self) -> List[TestResult]:
        ...

    def save(self, history: Sequence[TestResult]) -> None:
        ...


def parse_history(raw: Any) -> List[TestResult]:
    """Validate a decoded JSON value as a history list.

    Raises:
        ValidationError: If the value is not a list of test results
    """
    return _history_adapter.validate_python(raw)


def dump_history(history: Sequence[TestResult]) -> List[Dict[str, Any]]:
    return [result.model_dump(mode="json", by_alias=True) for result in history]


class InMemoryHistoryStore:
    """History store that keeps serialized snapshots in memory."""

    def __init__(self, history: Sequence[TestResult] = ()):
        self._snapshot = dump_history(history)
        self.save_count = 0

    def load(self) -> List[TestResult]:
        return parse_history(self._snapshot)

    def save(self, history: Sequence[TestResult]) -> None:
        self._snapshot = dump_history(history)
        self.save_count += 1


class JsonFileHistoryStore:
    """
    Key-value JSON file holding the history under a single key.

    The file is a JSON object so other keys can live alongside the history,
    the way browser local storage holds several entries.
    """

    def __init__(self, path: Union[str, Path], key: str = DEFAULT_HISTORY_KEY):
        self.path = Path(path)
        self.key = key

    def _read_document(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        document = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(document, dict):
            raise ValueError(
                f"expected a JSON object, found {type(document).__name__}"
            )
        return document

    def load(self) -> List[TestResult]:
        """Read the stored history; unreadable data yields an empty history."""
        try:
            document = self._read_document()
            if self.key not in document:
                return []
            history = parse_history(document[self.key])
        except (OSError, ValueError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError
            logger.error(f"Discarding unreadable history in {self.path}: {e}")
            return []

        logger.info(f"Loaded {len(history)} test results from {self.path}")
        return history

    def save(self, history: Sequence[TestResult]) -> None:
        """Write the whole history, replacing the stored value atomically."""
        try:
            document = self._read_document()
        except (OSError, ValueError) as e:
            logger.warning(f"Overwriting unreadable store {self.path}: {e}")
            document = {}
        document[self.key] = dump_history(history)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Saved {len(history)} test results to {self.path}")
