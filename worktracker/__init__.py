"""WorkTracker: log work points against projects, with a persisted stopwatch."""

__version__ = "0.1.0"
