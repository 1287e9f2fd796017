"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Atomic I/O and YAML loading (fs)
    - Unified logging (logging_config)
    - Benchmark timing (profiler)

No module in utils/ may import from upper layers (core, arb, render, scripts).

Convenience imports:
    from pseudo_hilbert.utils import fs, profiler
    from pseudo_hilbert.utils.logging_config import setup_logging, shutdown
"""

from . import fs
from . import logging_config
from . import profiler

from .logging_config import push_context, setup_logging, shutdown

__all__ = [
    'fs',
    'logging_config',
    'profiler',
    'setup_logging',
    'push_context',
    'shutdown',
]
