"""Native library build and release tooling: toolchain resolution, cargo builds, artifact naming, release matrix."""

__version__ = "0.3.0"
