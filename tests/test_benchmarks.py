"""Performance benchmark suite for the topology engine.

Measures performance of key components:
- Graph build throughput
- Invariant analysis scaling
- Neighborhood assembly on large graphs
- Candidate validation throughput
"""

import time
from dataclasses import dataclass
from typing import Any, Callable

import pytest

from archguard.analysis import InvariantAnalyzer
from archguard.engine import NeighborhoodAssembler
from archguard.graph import GraphBuilder, SymbolGraph
from archguard.models import Edge, Edit, Symbol, SymbolKind
from archguard.validation import VirtualApplyValidator


@dataclass
class BenchmarkResult:
    """Result of a benchmark run."""

    name: str
    iterations: int
    total_time: float
    avg_time: float
    min_time: float
    max_time: float
    ops_per_sec: float
    metadata: dict[str, Any]

    def __str__(self) -> str:
        return (
            f"{self.name}:\n"
            f"  Iterations: {self.iterations}\n"
            f"  Total: {self.total_time:.3f}s\n"
            f"  Avg: {self.avg_time*1000:.2f}ms\n"
            f"  Min: {self.min_time*1000:.2f}ms\n"
            f"  Max: {self.max_time*1000:.2f}ms\n"
            f"  Ops/sec: {self.ops_per_sec:.1f}"
        )


def benchmark(
    name: str,
    func: Callable,
    iterations: int = 100,
    warmup: int = 5,
    **kwargs,
) -> BenchmarkResult:
    """Run a synchronous benchmark.

    Args:
        name: Benchmark name
        func: Function to benchmark
        iterations: Number of iterations
        warmup: Warmup iterations (not counted)
        **kwargs: Arguments to pass to func

    Returns:
        Benchmark result
    """
    for _ in range(warmup):
        func(**kwargs)

    times = []
    for _ in range(iterations):
        start = time.perf_counter()
        func(**kwargs)
        times.append(time.perf_counter() - start)

    total_time = sum(times)
    return BenchmarkResult(
        name=name,
        iterations=iterations,
        total_time=total_time,
        avg_time=total_time / iterations,
        min_time=min(times),
        max_time=max(times),
        ops_per_sec=iterations / total_time if total_time > 0 else 0,
        metadata={key: type(value).__name__ for key, value in kwargs.items()},
    )


def synthetic_graph(size: int) -> SymbolGraph:
    """A mostly acyclic module graph with a few back edges."""
    symbols = [
        Symbol(
            id=f"pkg/mod{i // 10}.py::f{i}",
            name=f"f{i}",
            kind=SymbolKind.FUNCTION,
            file_path=f"pkg/mod{i // 10}.py",
        )
        for i in range(size)
    ]
    ids = [symbol.id for symbol in symbols]
    edges = []
    for i in range(size - 1):
        edges.append(Edge(source_id=ids[i], target_id=ids[i + 1], strength=0.9))
        j = (i * 7 + 3) % size
        if j != i:
            edges.append(Edge(source_id=ids[i], target_id=ids[j], strength=0.4))
    return GraphBuilder().build(symbols, edges)


@pytest.fixture(scope="module")
def large_graph() -> SymbolGraph:
    return synthetic_graph(2000)


# ====================
# Analysis Benchmarks
# ====================


class TestAnalysisBenchmarks:
    """Benchmarks for graph build and invariant analysis."""

    def test_benchmark_build(self):
        result = benchmark("build_500_symbols", synthetic_graph, iterations=5, warmup=1, size=500)
        print(f"\n{result}")

        assert result.avg_time < 5.0

    def test_benchmark_analyze(self, large_graph):
        analyzer = InvariantAnalyzer()

        result = benchmark(
            "analyze_2000_symbols",
            analyzer.analyze,
            iterations=3,
            warmup=1,
            graph=large_graph,
        )
        print(f"\n{result}")

        report = analyzer.analyze(large_graph)
        assert report.node_count == 2000
        assert report.betti_0 == 1


# ====================
# Assembly and Validation Benchmarks
# ====================


class TestEngineBenchmarks:
    """Benchmarks for context assembly and virtual apply."""

    def test_benchmark_assemble(self, large_graph):
        assembler = NeighborhoodAssembler()
        seed = next(large_graph.symbol_ids())

        result = benchmark(
            "assemble_depth_2",
            assembler.assemble,
            iterations=20,
            graph=large_graph,
            seed_ids=[seed],
            depth=2,
            strength_threshold=0.5,
        )
        print(f"\n{result}")

        mini = assembler.assemble(large_graph, [seed], depth=2, strength_threshold=0.5)
        assert len(mini.symbols) == 3

    def test_benchmark_validate_many(self, large_graph):
        validator = VirtualApplyValidator()
        ids = list(large_graph.symbol_ids())
        candidates = [
            [
                Edit(
                    file_path="pkg/mod0.py",
                    new_edges=[Edge(source_id=ids[-1 - k], target_id=ids[k])],
                )
            ]
            for k in range(8)
        ]

        start = time.perf_counter()
        results = validator.validate_many(large_graph, None, candidates, max_workers=4)
        elapsed = time.perf_counter() - start
        print(f"\nvalidate_many: {len(candidates)} candidates in {elapsed*1000:.1f}ms")

        assert len(results) == len(candidates)
        assert all(result.introduces_cycles for result in results)


# ====================
# Scalability Tests
# ====================


class TestScalability:
    """Test scalability with increasing graph size."""

    def test_analysis_scaling(self):
        """Analysis should stay well below quadratic growth."""
        analyzer = InvariantAnalyzer()
        sizes = [100, 1000]
        results = []

        for size in sizes:
            graph = synthetic_graph(size)
            result = benchmark(
                f"analyze_{size}_symbols",
                analyzer.analyze,
                iterations=5,
                warmup=1,
                graph=graph,
            )
            results.append((size, result.avg_time))
            print(f"\n{result}")

        scaling_factor = results[-1][1] / results[0][1]
        print(f"\nScaling factor (100 -> 1000 symbols): {scaling_factor:.1f}x")
        assert scaling_factor < 100
