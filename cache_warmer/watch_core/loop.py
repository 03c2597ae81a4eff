"""Poll-and-diff monitoring loop.

Each tick re-walks the project, fingerprints every file and compares the
result with the baseline. On a difference the cache warmup runs
synchronously and the fresh map becomes the new baseline, so a given change
is reacted to exactly once.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from cache_warmer.logger import CacheWarmerError, ContextLogger
from cache_warmer.symfony.console import cache_warmup

from .config import LOGGER, ProjectConfiguration
from .fingerprint import (
    ChangeSummary,
    FingerprintMap,
    build_watch_map,
    fingerprints_equal,
    summarize_changes,
)
from .utils import format_duration

WarmupFn = Callable[[ProjectConfiguration], str]

# The first failed tick is logged as a warning, then only every Nth one in a row.
FAILURE_LOG_EVERY = 100


@dataclass(frozen=True)
class TickResult:
    changed: bool
    file_count: int
    summary: ChangeSummary = ChangeSummary()
    started_at: float = 0.0
    elapsed_ms: int = 0
    output: str = ""
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        """The scan itself failed; nothing was compared."""
        return not self.changed and self.error is not None


class ChangeDetector:
    """Owns the baseline fingerprint map between ticks."""

    def __init__(
        self,
        config: ProjectConfiguration,
        baseline: FingerprintMap,
        warmup: WarmupFn = cache_warmup,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config
        self._baseline: FingerprintMap = dict(baseline)
        self._warmup = warmup
        self._clock = clock
        self.consecutive_failures = 0
        self.log = ContextLogger(LOGGER, project=str(config.project_dir))

    @property
    def baseline(self) -> FingerprintMap:
        return dict(self._baseline)

    def _scan_failed(self, exc: CacheWarmerError) -> TickResult:
        self.consecutive_failures += 1
        count = self.consecutive_failures
        if count == 1:
            self.log.warning(f"Scan failed, keeping previous state: {exc}", failures=count)
        elif count % FAILURE_LOG_EVERY == 0:
            self.log.error(f"Scan still failing ({count} in a row): {exc}", failures=count)
        return TickResult(changed=False, file_count=len(self._baseline), error=exc)

    def _scan_recovered(self) -> None:
        if self.consecutive_failures:
            self.log.info(
                f"Scan recovered after {self.consecutive_failures} failed attempt(s)",
                failures=self.consecutive_failures,
            )
        self.consecutive_failures = 0

    def tick(self) -> TickResult:
        try:
            current = build_watch_map(self.config)
        except CacheWarmerError as exc:
            return self._scan_failed(exc)
        self._scan_recovered()

        if fingerprints_equal(self._baseline, current):
            return TickResult(changed=False, file_count=len(current))

        summary = summarize_changes(self._baseline, current)
        self.log.info(f"Update detected: {summary.describe()}", changed=summary.total)

        started = self._clock()
        output = ""
        error: Optional[BaseException] = None
        try:
            output = self._warmup(self.config)
        except CacheWarmerError as exc:
            error = exc
            self.log.error(f"Cache refresh failed: {exc}")
        elapsed_ms = int((self._clock() - started) * 1000)

        # the filesystem did change, whatever the warmup outcome
        self._baseline = current
        self.log.debug(f"Cache refresh took {format_duration(elapsed_ms)}")
        return TickResult(
            changed=True,
            file_count=len(current),
            summary=summary,
            started_at=started,
            elapsed_ms=elapsed_ms,
            output=output,
            error=error,
        )


def run_monitoring_loop(
    config: ProjectConfiguration,
    baseline: FingerprintMap,
    *,
    warmup: WarmupFn = cache_warmup,
    sleep: Callable[[float], None] = time.sleep,
    on_change: Optional[Callable[[TickResult], None]] = None,
) -> None:
    """Watch forever. Only process termination (or an exception from
    ``sleep``/``on_change``) ends it."""
    detector = ChangeDetector(config, baseline, warmup=warmup)
    while True:
        result = detector.tick()
        if result.changed:
            if on_change is not None:
                on_change(result)
            continue
        sleep(config.sleep_time)


__all__ = ["ChangeDetector", "TickResult", "run_monitoring_loop"]
