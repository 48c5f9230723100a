"""Aggregation helpers that turn dataset records into display series.

Every function here is pure and synchronous: records go in, new lists or
frozen value objects come out, and garbage input degrades to documented
``None`` sentinels instead of raising.
"""
