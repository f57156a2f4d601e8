"""
carwatch test suite.

Structure:
- unit/: Fast, isolated unit tests against an in-memory site (tests/fakes.py)
"""
