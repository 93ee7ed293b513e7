"""GCSS - Git Cloud Save System."""

__version__ = "0.3.0"
