"""Pure Python range coder, LZMA encoder and readers for LZMA and LZMA2 data."""

__version__ = "0.1.0"