"""
GP Kernel - operations core for a consulting department.

Provides:
- Role-gated approval state machines (shared workflow types)
- A single actor capability predicate
- Compare-and-set entity storage
- Typed errors and structured logging
"""

__version__ = "0.1.0"
