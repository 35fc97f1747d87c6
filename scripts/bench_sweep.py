"""
Animation Benchmark - sweep and aggregation.
Walks the render mode x particle count x library matrix, repeats each
configuration sequentially and averages the trials that succeeded.
"""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence

from bench_runner import METRIC_FIELDS, RunConfiguration, RunMetrics, TrialRunner


logger = logging.getLogger(__name__)


class SweepMatrix:
    """Lazy cross-product of the sweep axes. Iterating again starts over."""

    def __init__(self, render_modes: Sequence[str], particles: Sequence[int], libraries: Sequence[str]):
        self.render_modes = list(render_modes)
        self.particles = list(particles)
        self.libraries = list(libraries)

    def __iter__(self) -> Iterator[RunConfiguration]:
        for mode, count, library in itertools.product(self.render_modes, self.particles, self.libraries):
            yield RunConfiguration(render_mode=mode, library=library, particles=count)

    def __len__(self) -> int:
        return len(self.render_modes) * len(self.particles) * len(self.libraries)


@dataclass(frozen=True)
class AggregatedMetrics:
    duration_ms: float
    fps: float
    average_memory_usage_bytes: float
    cpu_usage_ms: float
    longest_frame_time_ms: float
    jank_score: float
    load_time_ms: float
    successes: int
    attempts: int


@dataclass
class ConfigurationResult:
    config: RunConfiguration
    attempts: int = 0
    trials: List[RunMetrics] = field(default_factory=list)

    def record(self, metrics: Optional[RunMetrics]) -> None:
        self.attempts += 1
        if metrics is not None:
            self.trials.append(metrics)

    @property
    def skipped(self) -> bool:
        return not self.trials

    def aggregate(self) -> Optional[AggregatedMetrics]:
        if not self.trials:
            return None
        count = len(self.trials)
        means = {name: sum(getattr(t, name) for t in self.trials) / count for name in METRIC_FIELDS}
        return AggregatedMetrics(successes=count, attempts=self.attempts, **means)


def format_summary(result: ConfigurationResult) -> List[str]:
    cfg = result.config
    header = f"Averages for Tab - {cfg.render_mode}, Library - {cfg.library}, Particles - {cfg.particles}:"
    agg = result.aggregate()
    if agg is None:
        return [
            header,
            f"Skipped: no successful trials ({result.attempts} attempted)",
            "",
        ]
    return [
        header,
        f"Average FPS: {agg.fps}",
        f"Average Memory Usage: {agg.average_memory_usage_bytes}b",
        f"Average CPU usage: {agg.cpu_usage_ms} ms",
        f"Average Longest Frame Time: {agg.longest_frame_time_ms}ms",
        f"Average Jank/Stutter Score: {agg.jank_score}",
        f"Average Load time: {agg.load_time_ms}ms",
        f"Successful trials: {agg.successes}/{agg.attempts}",
        "",
    ]


async def run_configuration(runner: TrialRunner, config: RunConfiguration, repeats: int) -> ConfigurationResult:
    result = ConfigurationResult(config=config)
    for repeat in range(repeats):
        print(
            f"Starting Measurement: Tab - {config.render_mode}, Library - {config.library}, "
            f"Particles - {config.particles}, Repeat - {repeat + 1}"
        )
        result.record(await runner.run(config))
    return result


async def run_sweep(runner: TrialRunner, matrix: SweepMatrix, repeats: int) -> List[ConfigurationResult]:
    results = []
    for config in matrix:
        result = await run_configuration(runner, config, repeats)
        if result.skipped:
            logger.warning("No successful trials for %s", config.label())
        for line in format_summary(result):
            print(line)
        results.append(result)
    return results
