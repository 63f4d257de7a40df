"""Unit tests for ResultStore."""

import json
from pathlib import Path

import pytest

from tb_runner.models.benchmark import Benchmark
from tb_runner.services.store import DEFAULT_KEY, ResultSink, ResultStore

pytestmark = [pytest.mark.unit, pytest.mark.unit_runner]


def _benchmark(name: str, failed: str | None = None) -> Benchmark:
    benchmark = Benchmark(name=name, language="rust")
    benchmark.begin_step("load", 0.0).end = 0.25
    if failed:
        benchmark.begin_step("await input", 0.25)
        benchmark.fail(failed)
    return benchmark


class TestResultStore:
    def test_missing_file_reads_empty(self, tmp_path: Path) -> None:
        assert ResultStore(tmp_path / "absent.json").read_results() == []

    def test_write_then_read(self, tmp_path: Path) -> None:
        store = ResultStore(tmp_path / "nested" / "results.json")
        benchmarks = [_benchmark("yew"), _benchmark("elm", failed="todo input not found")]

        store.write_results(benchmarks)

        assert store.read_results() == benchmarks
        document = json.loads(store.path.read_text())
        assert list(document) == [DEFAULT_KEY]

    def test_append_accumulates(self, tmp_path: Path) -> None:
        store = ResultStore(tmp_path / "results.json")

        store.append_results([_benchmark("yew")])
        merged = store.append_results([_benchmark("elm")])

        assert [b.name for b in merged] == ["yew", "elm"]
        assert [b.name for b in store.read_results()] == ["yew", "elm"]

    def test_other_keys_are_preserved(self, tmp_path: Path) -> None:
        path = tmp_path / "results.json"
        path.write_text(json.dumps({"settings": {"theme": "dark"}}))
        store = ResultStore(path)

        store.write_results([_benchmark("yew")])
        store.clear()

        assert json.loads(path.read_text()) == {"settings": {"theme": "dark"}}
        assert store.read_results() == []

    @pytest.mark.parametrize(
        "content",
        ["not json", "[1, 2]", json.dumps({DEFAULT_KEY: [{"steps": "nope"}]})],
    )
    def test_corrupt_payload_reads_empty(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "results.json"
        path.write_text(content)

        assert ResultStore(path).read_results() == []

    def test_custom_key(self, tmp_path: Path) -> None:
        path = tmp_path / "results.json"
        ResultStore(path, key="other").write_results([_benchmark("yew")])

        assert ResultStore(path).read_results() == []
        assert len(ResultStore(path, key="other").read_results()) == 1


def test_summary_table_is_a_result_sink() -> None:
    from tb_analytics.report import SummaryTable

    assert isinstance(SummaryTable(), ResultSink)
