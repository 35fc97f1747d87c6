"""
Shared fakes for the benchmark tests.

Provides a fake clock/sleep pair and fake Playwright page, browser,
browser type and DevTools session so the trial controller can run
without a real browser.
"""

import asyncio
from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


class FakeClock:
    """Virtual monotonic clock in seconds, shared by concurrent sleepers.

    A sleeper wakes only once no other pending sleep has an earlier
    deadline, so overlapping sleeps run side by side instead of adding up.
    Everything else awaited in the tests completes without suspending.
    """

    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []
        self._deadlines: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        deadline = self.now + seconds
        self._deadlines.append(deadline)
        try:
            await asyncio.sleep(0)
            while min(self._deadlines) < deadline:
                await asyncio.sleep(0)
            self.now = max(self.now, deadline)
        finally:
            self._deadlines.remove(deadline)


class FakePage:
    def __init__(
        self,
        duration_ms: Optional[float] = 10000.0,
        frames_rendered: int = 600,
        longest_frame_time: float = 42.5,
        heap_readings: Optional[List[float]] = None,
        ready: bool = True,
        task_duration: Optional[float] = 1.25,
        heap_available: bool = True,
        clock=None,
    ):
        self.duration_ms = duration_ms
        self.heap_readings = list(heap_readings or [1000.0, 2000.0, 3000.0])
        self.heap_calls = 0
        self.marks: List[str] = []
        self.mark_times: List[float] = []
        self.events: List[str] = []
        self.heap_available = heap_available
        self.clock = clock

        self.goto = AsyncMock()
        self.wait_for_selector = AsyncMock()
        if not ready:
            self.wait_for_selector.side_effect = PlaywrightTimeoutError("Timeout 300000ms exceeded.")

        self.frame_state = MagicMock()
        self.frame_state.evaluate = AsyncMock(
            return_value={"framesRendered": frames_rendered, "longestFrameTime": longest_frame_time}
        )
        self.evaluate_handle = AsyncMock(return_value=self.frame_state)

        metrics = [{"name": "JSHeapUsedSize", "value": 123.0}]
        if task_duration is not None:
            metrics.append({"name": "TaskDuration", "value": task_duration})
        self.cdp = MagicMock()
        self.cdp.send = AsyncMock(
            side_effect=lambda method, params=None: {"metrics": metrics} if method == "Performance.getMetrics" else {}
        )
        self.context = MagicMock()
        self.context.new_cdp_session = AsyncMock(return_value=self.cdp)

    async def evaluate(self, script, arg=None):
        if "performance.mark(" in script:
            self.marks.append(arg)
            self.events.append(arg)
            if self.clock is not None:
                self.mark_times.append(self.clock())
            return None
        if "performance.measure(" in script:
            start, end, _ = arg
            if start not in self.marks or end not in self.marks:
                return None
            return self.duration_ms
        if "layoutReflows" in script:
            self.events.append("snapshot")
            return {"memoryUsageStart": self.heap_readings[0], "layoutReflows": 7}
        if "usedJSHeapSize" in script:
            self.events.append("heap")
            if not self.heap_available:
                return None
            value = self.heap_readings[self.heap_calls % len(self.heap_readings)]
            self.heap_calls += 1
            return value
        raise AssertionError(f"unexpected script: {script}")


def make_browser_type(page: FakePage):
    browser = MagicMock()
    browser.new_page = AsyncMock(return_value=page)
    browser.close = AsyncMock()
    browser_type = MagicMock()
    browser_type.launch = AsyncMock(return_value=browser)
    return browser_type, browser


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_page():
    return FakePage()
