"""
Activity calendar and statistics core.

Turns monthly activity records fetched from the COROS training API into
a 6-week calendar grid, monthly/sport statistics with insights, and a
per-month cache with TTL and bounded capacity.

Structure:
- domain/: Value objects, entities, domain services and ports
- application/: Use cases and the facade service
- infrastructure/: Key-value stores, monthly cache, COROS API adapter
- tests/: Unit test suite
"""

__version__ = "1.0.0"
