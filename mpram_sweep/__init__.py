"""Quartus synthesis sweeps over multi-ported RAM design parameters."""

__version__ = "0.1.0"
