"""
Work Items Module
=================

Bounded Context for engineering work item tracking.

Responsibilities:
- Create, update, list and delete work items
- Filter by service, status and assignee; sort by update time, priority or due date
- Apply CI/CD and incident event rules (priority, status, labels)
"""
