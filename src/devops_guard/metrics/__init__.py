"""
Metrics Module
==============

Bounded Context for backlog health reporting.

Responsibilities:
- Compute backlog health, SLA breach rate, overdue count and average risk
- Capture at most one metrics snapshot per UTC day
- Serve snapshot history
"""
