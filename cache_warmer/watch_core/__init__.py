"""Change-detection engine for the cache warmer.

Modules:
    config: project configuration record, defaults and logger
    utils: duration formatting and small parsing helpers
    paths: watched file enumeration (exclusions, vendor rules)
    fingerprint: modification-time maps and their comparison
    loop: change detector and the monitoring loop
"""

from . import config, utils, paths, fingerprint, loop

__all__ = [
    "config",
    "utils",
    "paths",
    "fingerprint",
    "loop",
]
