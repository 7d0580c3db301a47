"""
Infrastructure Layer
=====================

Low-level technical concerns shared by all modules:
- Database engine and session management
"""
