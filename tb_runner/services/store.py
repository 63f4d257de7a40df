"""Persistence of benchmark results in a JSON key-value file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Protocol, Sequence, runtime_checkable

from pydantic import TypeAdapter, ValidationError

from tb_runner.models.benchmark import Benchmark

logger = logging.getLogger(__name__)

DEFAULT_KEY = "todo-mvc-bench"

_BENCHMARK_LIST = TypeAdapter(List[Benchmark])


@runtime_checkable
class ResultSink(Protocol):
    """Anything that accepts the aggregate results of a suite."""

    def publish(self, benchmarks: Sequence[Benchmark]) -> None:
        ...


class ResultStore:
    """
    Store a list of benchmarks under one key of a JSON document.

    Other keys in the same file are preserved. Reads are forgiving: a missing
    file, a missing key or an undecodable payload all yield an empty list.
    """

    def __init__(self, path: Path | str, key: str = DEFAULT_KEY) -> None:
        self.path = Path(path)
        self.key = key

    def _load_document(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable result store %s: %s", self.path, exc)
            return {}
        if not isinstance(document, dict):
            logger.warning("Ignoring result store %s: top level is not an object", self.path)
            return {}
        return document

    def read_results(self) -> List[Benchmark]:
        payload = self._load_document().get(self.key)
        if payload is None:
            logger.debug("No stored results under '%s' in %s", self.key, self.path)
            return []
        try:
            return _BENCHMARK_LIST.validate_python(payload)
        except ValidationError as exc:
            logger.warning(
                "Discarding corrupt results under '%s' in %s: %s",
                self.key,
                self.path,
                exc.error_count(),
            )
            return []

    def write_results(self, benchmarks: Sequence[Benchmark]) -> None:
        """Replace the stored list with ``benchmarks``."""
        document = self._load_document()
        document[self.key] = [benchmark.model_dump(mode="json") for benchmark in benchmarks]
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)
        logger.info("Stored %d benchmarks in %s", len(benchmarks), self.path)

    def append_results(self, benchmarks: Sequence[Benchmark]) -> List[Benchmark]:
        merged = self.read_results() + list(benchmarks)
        self.write_results(merged)
        return merged

    def clear(self) -> None:
        document = self._load_document()
        if document.pop(self.key, None) is None:
            return
        self.path.write_text(json.dumps(document, indent=2), encoding="utf-8")
