"""
DevOps Guard
============

Work item tracking service for engineering teams.

Bounded contexts:
- workitems: work item lifecycle, listing and event-driven rules
- metrics: backlog health aggregation and daily snapshots
"""

__version__ = "0.1.0"
