"""
Core fixed-width arithmetic, tick math and domain models.

This module contains the pure computational building blocks of the
concentrated-liquidity pricing engine; nothing here performs I/O.
"""
