"""
Animation Benchmark - static configuration tables.
The sweep matrix, timing constants and the injectable run settings.
"""

from dataclasses import dataclass, field
from typing import List, Optional


BASE_URL = "http://localhost:3000"

RENDER_MODES = ["DIVS", "SVGS", "CANVAS"]

LIBRARIES = [
    "gsap",
    "animejs",
    "mojs",
    "popmotion",
    "velocity-js",
    "react-spring",
    "framer-motion",
]

PARTICLE_PRESETS = {
    "DIVS": [10000, 15000, 30000, 45000],
    "SVGS": [2000, 5000, 10000, 15000],
    "CANVAS": [15000, 30000, 40000, 50000],
}

PARTICLES = PARTICLE_PRESETS["CANVAS"]

REPEATS = 1

BASE_ANIMATION_TIME_MS = 5000
BASE_STAGGER_TIME_MS = 10
ANIMATION_WAIT_MS = 10000

READY_SELECTOR = "#content"
READY_TIMEOUT_MS = 300000

MEMORY_POLL_INTERVAL_MS = 1000

# One frame at 60 Hz.
JANK_FRAME_BUDGET_MS = 16.67

WAIT_FIXED = "fixed"
WAIT_SCALED = "scaled"
WAIT_POLICIES = [WAIT_FIXED, WAIT_SCALED]


def scaled_animation_time(particles: int) -> int:
    return BASE_ANIMATION_TIME_MS + (particles - 1) * BASE_STAGGER_TIME_MS


def parse_csv(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def parse_particles(raw: Optional[str]) -> List[int]:
    values = []
    for part in parse_csv(raw):
        count = int(part)
        if count <= 0:
            raise ValueError(f"particle count must be positive: {part}")
        values.append(count)
    return values


@dataclass
class BenchSettings:
    base_url: str = BASE_URL
    render_modes: List[str] = field(default_factory=lambda: list(RENDER_MODES))
    libraries: List[str] = field(default_factory=lambda: list(LIBRARIES))
    particles: List[int] = field(default_factory=lambda: list(PARTICLES))
    repeats: int = REPEATS
    ready_selector: str = READY_SELECTOR
    ready_timeout_ms: int = READY_TIMEOUT_MS
    animation_wait_ms: int = ANIMATION_WAIT_MS
    wait_policy: str = WAIT_FIXED
    memory_interval_ms: int = MEMORY_POLL_INTERVAL_MS
    headless: bool = True
    cpu_throttle: Optional[float] = None
    settle_ms: int = 0

    def __post_init__(self):
        if self.repeats < 1:
            raise ValueError("repeats must be at least 1")
        if self.wait_policy not in WAIT_POLICIES:
            raise ValueError(f"unknown wait policy: {self.wait_policy}")
        if self.memory_interval_ms <= 0:
            raise ValueError("memory interval must be positive")

    def animation_wait_for(self, particles: int) -> int:
        """Milliseconds the controller sleeps through the animation window."""
        if self.wait_policy == WAIT_SCALED:
            return scaled_animation_time(particles)
        return self.animation_wait_ms


def particles_for_preset(name: str) -> List[int]:
    key = name.upper()
    if key not in PARTICLE_PRESETS:
        raise ValueError(f"unknown particle preset: {name}")
    return list(PARTICLE_PRESETS[key])
