"""Redis receiver: turns Redis INFO replies into typed metric batches."""

__version__ = "0.1.0"
