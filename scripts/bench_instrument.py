"""
Animation Benchmark - page instrumentation.
Installs the frame counter into the target page and records the marks
that bracket the animation window.
"""

from playwright.async_api import JSHandle, Page


START_MARK = "start-anim"
END_MARK = "end-anim"

FRAME_COUNTER_JS = """() => {
    const state = { framesRendered: 0, longestFrameTime: 0 };
    let lastFrameTimestamp = performance.now();
    const countFrames = () => {
        const now = performance.now();
        state.longestFrameTime = Math.max(state.longestFrameTime, now - lastFrameTimestamp);
        lastFrameTimestamp = now;
        state.framesRendered++;
        window.requestAnimationFrame(countFrames);
    };
    window.requestAnimationFrame(countFrames);
    return state;
}"""


async def install_frame_counter(page: Page) -> JSHandle:
    """Start counting frames in the page.

    The counter keeps rescheduling itself until the page goes away. The
    returned handle points at the page-local state object; read it with
    ``bench_metrics.read_frame_stats``.
    """
    return await page.evaluate_handle(FRAME_COUNTER_JS)


async def mark(page: Page, name: str) -> None:
    await page.evaluate("(name) => { performance.mark(name); }", name)


async def mark_start(page: Page) -> None:
    await mark(page, START_MARK)


async def mark_end(page: Page) -> None:
    await mark(page, END_MARK)
