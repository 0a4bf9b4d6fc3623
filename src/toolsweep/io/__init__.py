"""I/O utilities for toolsweep."""

from .stl import read_stl, write_stl

__all__ = ['read_stl', 'write_stl']
