"""
Animation Benchmark - metric extractors.
Read-side helpers that pull duration, frame, memory and CPU data out of an
instrumented page after (or while) the animation runs.
"""

import asyncio
import logging
import statistics
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from playwright.async_api import CDPSession, JSHandle, Page

from bench_config import JANK_FRAME_BUDGET_MS
from bench_instrument import END_MARK, START_MARK


logger = logging.getLogger(__name__)

DURATION_MEASURE = "anim-duration"

# GPU time is not exposed by Performance.getMetrics.
GPU_USAGE_UNAVAILABLE = "unavailable"

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], float]


class BenchmarkError(Exception):
    pass


class ExtractionFailure(BenchmarkError):
    """A value the metrics depend on was missing or unusable."""


@dataclass(frozen=True)
class FrameStats:
    frames_rendered: int
    longest_frame_time_ms: float


@dataclass(frozen=True)
class FrameTiming:
    fps: float
    longest_frame_time_ms: float
    jank_score: float


@dataclass(frozen=True)
class ResourceUsage:
    cpu_usage_ms: float
    gpu_usage: str = GPU_USAGE_UNAVAILABLE


@dataclass(frozen=True)
class MemorySnapshot:
    memory_usage_start: float
    layout_reflows: int


def compute_fps(frames_rendered: int, duration_ms: float) -> float:
    if duration_ms <= 0:
        raise ExtractionFailure(f"animation duration must be positive, got {duration_ms}")
    return frames_rendered / duration_ms * 1000


def compute_jank_score(frames_rendered: int, duration_ms: float) -> float:
    """Frames rendered minus the frames a steady 60 fps run would need.

    Negative when the page ran slower than 60 fps, slightly positive when
    faster. Not clamped.
    """
    return frames_rendered - duration_ms / JANK_FRAME_BUDGET_MS


async def measure_animation_duration(page: Page) -> float:
    duration = await page.evaluate(
        """([start, end, measureName]) => {
            const hasMark = (name) => performance.getEntriesByName(name, 'mark').length > 0;
            if (!hasMark(start) || !hasMark(end)) {
                return null;
            }
            performance.measure(measureName, start, end);
            const entries = performance.getEntriesByName(measureName, 'measure');
            return entries[entries.length - 1].duration;
        }""",
        [START_MARK, END_MARK, DURATION_MEASURE],
    )
    if duration is None:
        raise ExtractionFailure(f"missing '{START_MARK}' or '{END_MARK}' mark")
    return float(duration)


async def read_frame_stats(frame_state: JSHandle) -> FrameStats:
    raw = await frame_state.evaluate(
        "(state) => ({ framesRendered: state.framesRendered, longestFrameTime: state.longestFrameTime })"
    )
    if not raw or raw.get("framesRendered") is None:
        raise ExtractionFailure("frame counter state is unavailable")
    return FrameStats(
        frames_rendered=int(raw["framesRendered"]),
        longest_frame_time_ms=float(raw.get("longestFrameTime") or 0.0),
    )


async def calculate_fps_and_jank(frame_state: JSHandle, duration_ms: float) -> FrameTiming:
    stats = await read_frame_stats(frame_state)
    return FrameTiming(
        fps=compute_fps(stats.frames_rendered, duration_ms),
        longest_frame_time_ms=stats.longest_frame_time_ms,
        jank_score=compute_jank_score(stats.frames_rendered, duration_ms),
    )


async def get_cpu_and_gpu_usage(client: CDPSession) -> ResourceUsage:
    response = await client.send("Performance.getMetrics")
    for metric in response.get("metrics", []):
        if metric.get("name") == "TaskDuration":
            return ResourceUsage(cpu_usage_ms=float(metric["value"]))
    raise ExtractionFailure("TaskDuration missing from Performance.getMetrics")


async def read_heap_usage(page: Page) -> float:
    used = await page.evaluate("() => (performance.memory ? performance.memory.usedJSHeapSize : null)")
    if used is None:
        raise ExtractionFailure("performance.memory is not available in this browser")
    return float(used)


async def get_memory_and_layout_reflows(page: Page) -> MemorySnapshot:
    raw = await page.evaluate(
        """() => ({
            memoryUsageStart: performance.memory ? performance.memory.usedJSHeapSize : null,
            layoutReflows: performance.getEntriesByType('layout').length,
        })"""
    )
    if raw.get("memoryUsageStart") is None:
        raise ExtractionFailure("performance.memory is not available in this browser")
    return MemorySnapshot(
        memory_usage_start=float(raw["memoryUsageStart"]),
        layout_reflows=int(raw.get("layoutReflows") or 0),
    )


async def record_memory_usage_over_time(
    page: Page,
    interval_ms: float,
    duration_ms: float,
    sleep: Sleep = asyncio.sleep,
    clock: Clock = time.monotonic,
    readings: Optional[List[float]] = None,
) -> List[float]:
    """Poll the JS heap every ``interval_ms`` until ``duration_ms`` has passed.

    The last pause is cut short at the deadline so the sampler never outlives
    the window. Pass ``readings`` to keep what was collected if the sampler
    is cancelled.
    """
    if readings is None:
        readings = []
    deadline = clock() + duration_ms / 1000
    while clock() < deadline:
        readings.append(await read_heap_usage(page))
        remaining = deadline - clock()
        if remaining <= 0:
            break
        await sleep(min(interval_ms / 1000, remaining))
    logger.debug("Memory readings: %s", ", ".join(f"{r:.0f}" for r in readings))
    return readings


def average(readings: List[float], label: Optional[str] = None) -> float:
    if not readings:
        raise ExtractionFailure(f"no {label or 'readings'} to average")
    return statistics.fmean(readings)
