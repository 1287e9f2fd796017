"""Command-line entry points: ``hilbertgen`` and ``hilbertbench``."""
