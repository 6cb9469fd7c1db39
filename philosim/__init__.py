"""Threaded dining philosophers simulation with a command-line entry point."""

__version__ = "0.1.0"