"""
Test suite for clmm-tickmath

Contains:
- tests/unit/          : Unit tests for limbs, fixed-width substrate, I256,
                         tick math and PriceLevel
"""
