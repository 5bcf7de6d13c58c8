"""
Stats Feed
==========

Resource gauges for the clock face.

These numbers are a SIMULATION for visual liveliness, not telemetry:
- RAM is this process's resident memory as a share of physical memory
  (psutil), or a random value in [30, 50) when that is unavailable.
- CPU, download and upload are bounded random walks.

Raw values are kept as is; only the display bars are clamped to [0, 100].
"""

import logging
import random
from enum import Enum
from typing import Any, Callable, List, Optional

import psutil

from .models import StatsSample
from .scheduling import Scheduler

logger = logging.getLogger("bartstart.stats")

# Walk step widths: next = prev + uniform(-k/2, k/2)
CPU_STEP = 4.0
DOWNLOAD_STEP = 50.0
UPLOAD_STEP = 5.0

# Raw units that fill a bar
DOWNLOAD_FULL_SCALE = 1000.0
UPLOAD_FULL_SCALE = 500.0


class StatMetric(Enum):
    RAM = "ram"
    CPU = "cpu"
    DOWNLOAD = "download"
    UPLOAD = "upload"


def process_memory_percent() -> Optional[float]:
    """Memory-pressure probe; None if psutil cannot read it."""
    try:
        return float(psutil.Process().memory_percent())
    except (psutil.Error, OSError) as e:
        logger.debug("Memory probe failed: %s", e)
        return None


def _walk(value: float, width: float, rng: random.Random) -> float:
    return value + rng.uniform(-width / 2, width / 2)


def step(
    previous: StatsSample,
    rng: random.Random,
    ram_probe: Callable[[], Optional[float]] = process_memory_percent,
) -> StatsSample:
    """Next sample from the previous one. Pure apart from *rng* and *ram_probe*."""
    ram = ram_probe()
    if ram is None or not 0 < ram <= 100:
        ram = rng.uniform(30, 50)

    return StatsSample(
        ram_pct=ram,
        cpu_pct=min(100.0, max(0.0, _walk(previous.cpu_pct, CPU_STEP, rng))),
        download_kbps=max(0.0, _walk(previous.download_kbps, DOWNLOAD_STEP, rng)),
        upload_kbps=max(0.0, _walk(previous.upload_kbps, UPLOAD_STEP, rng)),
    )


def bar_percentage(metric: StatMetric, value: float) -> float:
    """Fill level for a display bar, clamped to [0, 100]."""
    if metric is StatMetric.DOWNLOAD:
        pct = value / DOWNLOAD_FULL_SCALE * 100
    elif metric is StatMetric.UPLOAD:
        pct = value / UPLOAD_FULL_SCALE * 100
    else:
        pct = value
    return min(100.0, max(0.0, pct))


def format_stat(metric: StatMetric, value: float) -> str:
    if metric in (StatMetric.RAM, StatMetric.CPU):
        return f"{value:.0f}%"
    return f"{value:.1f}kb"


def sample_value(sample: StatsSample, metric: StatMetric) -> float:
    return {
        StatMetric.RAM: sample.ram_pct,
        StatMetric.CPU: sample.cpu_pct,
        StatMetric.DOWNLOAD: sample.download_kbps,
        StatMetric.UPLOAD: sample.upload_kbps,
    }[metric]


class StatsFeed:
    """Re-samples every *interval_ms* on the scheduler until stopped"""

    def __init__(
        self,
        scheduler: Scheduler,
        interval_ms: int = 2000,
        rng: Optional[random.Random] = None,
        ram_probe: Callable[[], Optional[float]] = process_memory_percent,
    ):
        self.scheduler = scheduler
        self.interval_ms = interval_ms
        self.rng = rng or random.Random()
        self.ram_probe = ram_probe

        self.sample = StatsSample()
        self._after_id: Any = None
        self._running = False
        self._listeners: List[Callable[[StatsSample], None]] = []

    def add_listener(self, callback: Callable[[StatsSample], None]):
        self._listeners.append(callback)

    @property
    def running(self) -> bool:
        return self._running

    def start(self):
        if self._running:
            return
        self._running = True
        self._schedule()

    def stop(self):
        self._running = False
        if self._after_id is not None:
            try:
                self.scheduler.after_cancel(self._after_id)
            except Exception as e:
                logger.debug("after_cancel failed: %s", e)
            self._after_id = None

    def _schedule(self):
        self._after_id = self.scheduler.after(self.interval_ms, self._on_timer)

    def _on_timer(self):
        self._after_id = None
        if not self._running:
            return
        self.tick()
        self._schedule()

    def tick(self) -> StatsSample:
        self.sample = step(self.sample, self.rng, self.ram_probe)
        for callback in list(self._listeners):
            callback(self.sample)
        return self.sample
