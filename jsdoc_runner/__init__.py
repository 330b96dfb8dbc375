"""
jsdoc_runner package

This package runs the JSDoc 3 documentation generator from validated settings.

Key responsibilities are split across modules:
- `context.py`: immutable run configuration and its validating builder
- `settings.py`: parse a YAML settings file into a builder
- `renderer.py`: render templated generator config files into scratch space
- `distribution.py`: isolated npm registry interactions (release lookup / install)
- `invoker.py`: build the generator command line and run it as a subprocess
- `cli.py`: CLI entrypoint and orchestration (settings -> build -> run)
"""

from __future__ import annotations

from jsdoc_runner.context import (
    ConfigurationBuilder,
    ConfigurationError,
    InvalidStateError,
    MissingSourcesError,
    RunConfiguration,
)

__all__ = [
    "ConfigurationBuilder",
    "ConfigurationError",
    "InvalidStateError",
    "MissingSourcesError",
    "RunConfiguration",
    "__version__",
]

__version__ = "0.1.0"
