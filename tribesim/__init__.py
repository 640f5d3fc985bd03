"""tribesim: a tick-driven tribe civilization simulation."""

__version__ = "0.1.0"
