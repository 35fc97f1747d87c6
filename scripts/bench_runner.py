"""
Animation Benchmark - single trial controller.
Launches a fresh browser, loads one configuration of the target page,
instruments it, waits out the animation window and extracts RunMetrics.
"""

import asyncio
import logging
import time
from dataclasses import asdict, dataclass, fields
from typing import List, Optional
from urllib.parse import urlencode

from playwright.async_api import Browser, BrowserType, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from bench_config import BenchSettings, scaled_animation_time
from bench_instrument import install_frame_counter, mark_end, mark_start
from bench_metrics import (
    BenchmarkError,
    Clock,
    ExtractionFailure,
    Sleep,
    average,
    calculate_fps_and_jank,
    get_cpu_and_gpu_usage,
    get_memory_and_layout_reflows,
    measure_animation_duration,
    record_memory_usage_over_time,
)


logger = logging.getLogger(__name__)

LAUNCH_ARGS = ["--enable-precise-memory-info"]


class ReadinessTimeout(BenchmarkError):
    """The target page never rendered its readiness selector."""


@dataclass(frozen=True)
class RunConfiguration:
    render_mode: str
    library: str
    particles: int

    def url(self, base_url: str) -> str:
        query = urlencode({"tab": self.render_mode, "library": self.library, "particles": self.particles})
        return f"{base_url}?{query}"

    def label(self) -> str:
        return f"TAB - {self.render_mode}; LIBRARY - {self.library}; PARTICLES - {self.particles};"


@dataclass(frozen=True)
class RunMetrics:
    duration_ms: float
    fps: float
    average_memory_usage_bytes: float
    cpu_usage_ms: float
    longest_frame_time_ms: float
    jank_score: float
    load_time_ms: float


METRIC_FIELDS = tuple(f.name for f in fields(RunMetrics))


class TrialRunner:
    def __init__(
        self,
        browser_type: BrowserType,
        settings: Optional[BenchSettings] = None,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = time.monotonic,
    ):
        self.browser_type = browser_type
        self.settings = settings or BenchSettings()
        self.sleep = sleep
        self.clock = clock

    async def launch(self) -> Browser:
        return await self.browser_type.launch(headless=self.settings.headless, args=LAUNCH_ARGS)

    async def run(self, config: RunConfiguration) -> Optional[RunMetrics]:
        """Run one trial. Returns None when the trial had to be skipped.

        Only readiness timeouts and extraction failures are absorbed here;
        launch and navigation errors propagate to the caller.
        """
        browser = await self.launch()
        stage = "new_page"
        try:
            page = await browser.new_page()

            stage = "goto"
            started = self.clock()
            await page.goto(config.url(self.settings.base_url), wait_until="domcontentloaded")

            stage = "wait_ready"
            try:
                await page.wait_for_selector(
                    self.settings.ready_selector,
                    state="attached",
                    timeout=self.settings.ready_timeout_ms,
                )
            except PlaywrightTimeoutError as exc:
                raise ReadinessTimeout(
                    f"{self.settings.ready_selector} not found within {self.settings.ready_timeout_ms} ms"
                ) from exc
            logger.info("Page ready: %s", config.label())

            stage = "instrument"
            client = await page.context.new_cdp_session(page)
            prep_started = self.clock()
            if self.settings.cpu_throttle:
                await client.send("Emulation.setCPUThrottlingRate", {"rate": self.settings.cpu_throttle})
            if self.settings.settle_ms:
                await self.sleep(self.settings.settle_ms / 1000)
            # throttling and settling are not part of page load
            prep_s = self.clock() - prep_started
            await client.send("Performance.enable")
            await client.send("Overlay.setShowFPSCounter", {"show": True})
            frame_state = await install_frame_counter(page)

            stage = "mark_start"
            await mark_start(page)
            load_time_ms = (self.clock() - started - prep_s) * 1000
            snapshot = await get_memory_and_layout_reflows(page)

            stage = "animate"
            readings = await self.animate_window(page, config)

            stage = "mark_end"
            await mark_end(page)

            stage = "extract"
            duration_ms = await measure_animation_duration(page)
            timing = await calculate_fps_and_jank(frame_state, duration_ms)
            usage = await get_cpu_and_gpu_usage(client)
            logger.debug(
                "Heap at start %.0fb, layout reflows %d, GPU usage %s",
                snapshot.memory_usage_start,
                snapshot.layout_reflows,
                usage.gpu_usage,
            )

            metrics = RunMetrics(
                duration_ms=duration_ms,
                fps=timing.fps,
                average_memory_usage_bytes=average(readings, "memory readings"),
                cpu_usage_ms=usage.cpu_usage_ms,
                longest_frame_time_ms=timing.longest_frame_time_ms,
                jank_score=timing.jank_score,
                load_time_ms=load_time_ms,
            )
            logger.debug("Trial metrics for %s %s", config.label(), asdict(metrics))
            return metrics

        except (ReadinessTimeout, ExtractionFailure) as exc:
            logger.warning("Skipping trial %s at %s: %s", config.label(), stage, exc)
            print(config.label())
            print(f"⚠️  Trial skipped at {stage}: {exc}")
            return None
        finally:
            await browser.close()

    async def animate_window(self, page: Page, config: RunConfiguration) -> List[float]:
        """Sleep through the animation window while sampling the heap.

        The window sleep sets the length; a sampler still running when it
        ends is cancelled and its readings so far are kept. A sampler failure
        cancels the sleep and propagates.
        """
        wait_ms = self.settings.animation_wait_for(config.particles)
        logger.debug(
            "Animation window %d ms (particle-scaled time would be %d ms)",
            wait_ms,
            scaled_animation_time(config.particles),
        )
        readings: List[float] = []
        window = asyncio.ensure_future(self.sleep(wait_ms / 1000))
        sampler = asyncio.ensure_future(
            record_memory_usage_over_time(
                page,
                self.settings.memory_interval_ms,
                wait_ms,
                sleep=self.sleep,
                clock=self.clock,
                readings=readings,
            )
        )
        try:
            done, _ = await asyncio.wait({window, sampler}, return_when=asyncio.FIRST_COMPLETED)
            if sampler in done:
                sampler.result()
                await window
        finally:
            for task in (window, sampler):
                if not task.done():
                    task.cancel()
            await asyncio.gather(window, sampler, return_exceptions=True)
        return readings
