"""Cycle-level MIPS processor simulator with single-cycle and pipelined models."""

__version__ = "0.1.0"