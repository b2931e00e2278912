"""
Test suite for the interval-indexed data model

Contains:
- tests/unit/          : Unit tests for individual modules
"""
