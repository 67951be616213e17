"""Order-book tracking, microstructure signals, pipeline statistics and market event simulation."""

__version__ = "0.1.0"