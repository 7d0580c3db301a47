"""
Shared Kernel Module
====================

This module contains shared infrastructure used across all bounded
contexts (Work Items and Metrics).

Architecture Pattern: Modular Monolith
- Each module (workitems, metrics) is a bounded context
- Shared kernel contains only generic infrastructure

DO NOT add business logic from Work Items or Metrics to shared kernel.
"""
