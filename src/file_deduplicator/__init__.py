"""Find duplicate files by size, sampled signature and byte-exact comparison."""

__version__ = "0.1.0"
