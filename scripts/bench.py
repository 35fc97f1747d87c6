#!/usr/bin/env python3
"""
Animation Benchmark - sweep entry point.
Measures FPS, jank, memory, CPU and load time of animation libraries
across render modes and particle counts using Playwright.
"""

import argparse
import asyncio
import logging
from typing import List, Optional

try:
    from playwright.async_api import async_playwright
except ImportError:
    print("ERROR: playwright not installed. Run: pip install playwright && playwright install chromium")
    raise SystemExit(1)

from bench_config import (
    ANIMATION_WAIT_MS,
    BASE_URL,
    MEMORY_POLL_INTERVAL_MS,
    PARTICLE_PRESETS,
    READY_TIMEOUT_MS,
    REPEATS,
    WAIT_FIXED,
    WAIT_SCALED,
    BenchSettings,
    parse_csv,
    parse_particles,
    particles_for_preset,
)
from bench_runner import TrialRunner
from bench_sweep import ConfigurationResult, SweepMatrix, run_sweep


def settings_from_args(args: argparse.Namespace) -> BenchSettings:
    settings = BenchSettings(
        base_url=args.base_url,
        repeats=args.repeats,
        ready_timeout_ms=args.ready_timeout_ms,
        animation_wait_ms=args.animation_wait_ms,
        wait_policy=WAIT_SCALED if args.scaled_wait else WAIT_FIXED,
        memory_interval_ms=args.memory_interval_ms,
        headless=not args.headed,
        cpu_throttle=args.cpu_throttle,
        settle_ms=args.settle_ms,
    )
    render_modes = parse_csv(args.render_modes)
    if render_modes:
        settings.render_modes = render_modes
    libraries = parse_csv(args.libraries)
    if libraries:
        settings.libraries = libraries
    if args.particle_preset:
        settings.particles = particles_for_preset(args.particle_preset)
    particles = parse_particles(args.particles)
    if particles:
        settings.particles = particles
    return settings


async def main_async(settings: BenchSettings) -> List[ConfigurationResult]:
    matrix = SweepMatrix(settings.render_modes, settings.particles, settings.libraries)
    async with async_playwright() as p:
        runner = TrialRunner(p.chromium, settings)
        results = await run_sweep(runner, matrix, settings.repeats)

    skipped = sum(1 for r in results if r.skipped)
    print(f"✅ Sweep complete: {len(results) - skipped}/{len(results)} configurations measured")
    return results


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Benchmark animation libraries in a headless browser")
    parser.add_argument("--base-url", default=BASE_URL, help="Target page URL")
    parser.add_argument("--render-modes", help="Comma-separated render modes (DIVS,SVGS,CANVAS)")
    parser.add_argument("--libraries", help="Comma-separated animation libraries")
    parser.add_argument("--particles", help="Comma-separated particle counts")
    parser.add_argument(
        "--particle-preset",
        choices=sorted(PARTICLE_PRESETS),
        help="Use the particle levels tuned for one render mode",
    )
    parser.add_argument("--repeats", type=int, default=REPEATS, help="Trials per configuration")
    parser.add_argument(
        "--animation-wait-ms",
        type=int,
        default=ANIMATION_WAIT_MS,
        help="Fixed animation window in milliseconds",
    )
    parser.add_argument(
        "--scaled-wait",
        action="store_true",
        help="Scale the animation window with the particle count instead of using the fixed wait",
    )
    parser.add_argument(
        "--ready-timeout-ms",
        type=int,
        default=READY_TIMEOUT_MS,
        help="How long to wait for the page readiness selector",
    )
    parser.add_argument(
        "--memory-interval-ms",
        type=int,
        default=MEMORY_POLL_INTERVAL_MS,
        help="Heap sampling interval during the animation window",
    )
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    parser.add_argument("--cpu-throttle", type=float, help="CPU slowdown factor applied via DevTools")
    parser.add_argument("--settle-ms", type=int, default=0, help="Pause after the page is ready")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log per-trial details")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = settings_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(main_async(settings))


if __name__ == "__main__":
    main()
