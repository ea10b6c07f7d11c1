"""Performance benchmarking for Markdown tokenization and tree building.

This module times both parsing stages on generated documents and samples
resident memory so that performance regressions can be tracked over time.
"""

import gc
import statistics
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import psutil

from robust_markdown_parser.shared import get_logger
from robust_markdown_parser.tree import MarkdownTreeBuilder

from .tokenizer import MarkdownTokenizer

STAGES = ("tokenize", "build")


@dataclass
class BenchmarkResult:
    """Result of a single benchmark run."""

    stage: str
    test_case: str
    processing_time_ms: float
    memory_used_mb: float
    characters_processed: int
    tokens_processed: int
    nodes_created: int = 0

    @property
    def characters_per_second(self) -> float:
        """Calculate characters processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms

    @property
    def tokens_per_second(self) -> float:
        """Calculate tokens handled per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.tokens_processed * 1000.0) / self.processing_time_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "test_case": self.test_case,
            "processing_time_ms": self.processing_time_ms,
            "memory_used_mb": self.memory_used_mb,
            "characters_processed": self.characters_processed,
            "tokens_processed": self.tokens_processed,
            "nodes_created": self.nodes_created,
            "characters_per_second": self.characters_per_second,
            "tokens_per_second": self.tokens_per_second,
        }


@dataclass
class BenchmarkSuite:
    """Collection of benchmark results with statistical analysis."""

    results: List[BenchmarkResult] = field(default_factory=list)
    suite_name: str = "Markdown Parsing Benchmark"
    timestamp: float = field(default_factory=time.time)

    def add_result(self, result: BenchmarkResult) -> None:
        self.results.append(result)

    def get_results_by_stage(self, stage: str) -> List[BenchmarkResult]:
        return [r for r in self.results if r.stage == stage]

    def get_results_by_test_case(self, test_case: str) -> List[BenchmarkResult]:
        return [r for r in self.results if r.test_case == test_case]

    def get_statistics(self, stage: str, metric: str) -> Dict[str, float]:
        """Get statistical analysis of one metric for a stage.

        Args:
            stage: ``"tokenize"`` or ``"build"``
            metric: Name of a numeric BenchmarkResult attribute or property

        Returns:
            min/max/mean/median/stdev/count, or an empty dict if nothing matches
        """
        values = [
            float(getattr(result, metric))
            for result in self.get_results_by_stage(stage)
            if hasattr(result, metric)
        ]
        if not values:
            return {}

        return {
            "min": min(values),
            "max": max(values),
            "mean": statistics.mean(values),
            "median": statistics.median(values),
            "stdev": statistics.stdev(values) if len(values) > 1 else 0.0,
            "count": len(values)
        }

    def generate_report(self) -> Dict[str, Any]:
        """Generate a benchmark report grouped by stage and test case."""
        test_cases = sorted(set(r.test_case for r in self.results))
        report: Dict[str, Any] = {
            "suite_name": self.suite_name,
            "timestamp": self.timestamp,
            "total_results": len(self.results),
            "test_cases": test_cases,
            "summary": {},
            "detailed_results": {}
        }

        for stage in STAGES:
            if not self.get_results_by_stage(stage):
                continue
            report["summary"][stage] = {
                "performance": self.get_statistics(stage, "characters_per_second"),
                "time": self.get_statistics(stage, "processing_time_ms"),
                "memory": self.get_statistics(stage, "memory_used_mb")
            }

        for test_case in test_cases:
            report["detailed_results"][test_case] = {
                result.stage: result.to_dict()
                for result in self.get_results_by_test_case(test_case)
            }

        return report


class ParsingBenchmark:
    """Benchmark for the tokenizer and tree builder stages."""

    def __init__(
        self,
        iterations: int = 10,
        warmup_runs: int = 2,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize benchmark.

        Args:
            iterations: Number of timed runs averaged per test case and stage
            warmup_runs: Untimed runs before measuring
            correlation_id: Optional correlation ID for tracking

        Raises:
            ValueError: If ``iterations`` is smaller than 1 or ``warmup_runs``
                is negative
        """
        if iterations < 1:
            raise ValueError("iterations must be >= 1")
        if warmup_runs < 0:
            raise ValueError("warmup_runs must be >= 0")

        self.iterations = iterations
        self.warmup_runs = warmup_runs
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "benchmark")

        self.tokenizer = MarkdownTokenizer(correlation_id=correlation_id)
        self.test_cases = self._create_test_cases()

    def _create_test_cases(self) -> Dict[str, str]:
        return {
            "small": "# Title\n\nSome *italic* and **bold** text.\n- item\n",
            "nested_lists": self._generate_nested_lists(50),
            "emphasis_heavy": " ".join(
                f"*word{i}* **strong{i}** plain{i}" for i in range(200)
            ) + "\n",
            "large": self._generate_large_document(500),
        }

    @staticmethod
    def _generate_nested_lists(items: int) -> str:
        lines = []
        for i in range(items):
            lines.append(f"{' ' * (i % 4)}- item {i}")
        return "\n".join(lines) + "\n"

    @staticmethod
    def _generate_large_document(sections: int) -> str:
        parts = []
        for i in range(sections):
            parts.append(
                f"## Section {i}\n"
                f"Paragraph {i} with *emphasis* and **strong** words.\n"
                f"- first {i}\n"
                f" - nested {i}\n"
                f"- second {i}\n"
                "\n"
            )
        return "".join(parts)

    @staticmethod
    def _measure_memory_usage() -> float:
        """Get current resident memory in MB."""
        return psutil.Process().memory_info().rss / 1024 / 1024

    def _measure(self, run: Callable[[], Any]) -> Dict[str, Any]:
        gc.collect()
        memory_before = self._measure_memory_usage()
        start_time = time.time()
        value = run()
        elapsed_ms = (time.time() - start_time) * 1000
        memory_after = self._measure_memory_usage()
        return {
            "value": value,
            "time_ms": elapsed_ms,
            "memory_mb": max(0.0, memory_after - memory_before),
        }

    def benchmark_case(self, test_case: str, text: str) -> List[BenchmarkResult]:
        """Benchmark both stages on one document.

        Returns:
            One averaged BenchmarkResult per stage
        """
        for _ in range(self.warmup_runs):
            MarkdownTreeBuilder().build(self.tokenizer.tokenize(text))

        tokenize_runs = []
        build_runs = []
        for _ in range(self.iterations):
            tokenized = self._measure(lambda: self.tokenizer.tokenize(text))
            tokenize_runs.append(tokenized)
            tokens = tokenized["value"]
            built = self._measure(lambda: MarkdownTreeBuilder().build(tokens))
            build_runs.append(built)

        token_count = tokenize_runs[0]["value"].token_count
        node_count = build_runs[0]["value"].node_count
        return [
            BenchmarkResult(
                stage="tokenize",
                test_case=test_case,
                processing_time_ms=statistics.mean(r["time_ms"] for r in tokenize_runs),
                memory_used_mb=statistics.mean(r["memory_mb"] for r in tokenize_runs),
                characters_processed=len(text),
                tokens_processed=token_count,
            ),
            BenchmarkResult(
                stage="build",
                test_case=test_case,
                processing_time_ms=statistics.mean(r["time_ms"] for r in build_runs),
                memory_used_mb=statistics.mean(r["memory_mb"] for r in build_runs),
                characters_processed=len(text),
                tokens_processed=token_count,
                nodes_created=node_count,
            ),
        ]

    def run_benchmark(self) -> BenchmarkSuite:
        """Run every generated test case through both stages."""
        suite = BenchmarkSuite()

        self.logger.info(
            "Starting benchmark suite",
            extra={
                "test_cases": len(self.test_cases),
                "iterations": self.iterations,
                "warmup_runs": self.warmup_runs
            }
        )

        for test_case, text in self.test_cases.items():
            self.logger.debug(f"Benchmarking test case: {test_case}")
            for result in self.benchmark_case(test_case, text):
                suite.add_result(result)

        self.logger.info(
            "Benchmark suite completed",
            extra={
                "total_results": len(suite.results),
                "suite_duration_seconds": time.time() - suite.timestamp
            }
        )

        return suite

    @staticmethod
    def compare_performance(
        baseline_suite: BenchmarkSuite,
        current_suite: BenchmarkSuite,
        threshold: float = 0.05
    ) -> Dict[str, Any]:
        """Compare processing times between two suites.

        A relative change beyond ``threshold`` counts as an improvement or
        regression; results missing from either suite are ignored.
        """
        comparison: Dict[str, Any] = {
            "baseline_timestamp": baseline_suite.timestamp,
            "current_timestamp": current_suite.timestamp,
            "improvements": {},
            "regressions": {},
        }

        for baseline in baseline_suite.results:
            current = next(
                (
                    r for r in current_suite.results
                    if r.stage == baseline.stage and r.test_case == baseline.test_case
                ),
                None
            )
            if current is None or baseline.processing_time_ms <= 0:
                continue

            change = (
                (current.processing_time_ms - baseline.processing_time_ms)
                / baseline.processing_time_ms
            )
            key = f"{baseline.stage}_{baseline.test_case}"
            entry = {
                "change_percent": change * 100,
                "baseline_time_ms": baseline.processing_time_ms,
                "current_time_ms": current.processing_time_ms
            }
            if change < -threshold:
                comparison["improvements"][key] = entry
            elif change > threshold:
                comparison["regressions"][key] = entry

        comparison["summary"] = {
            "total_improvements": len(comparison["improvements"]),
            "total_regressions": len(comparison["regressions"]),
            "has_regressions": bool(comparison["regressions"])
        }
        return comparison
