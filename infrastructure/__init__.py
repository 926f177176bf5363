"""
Infrastructure Package
======================

Provides abstraction layers for external dependencies following the Dependency Inversion Principle.

Modules:
    - events: Domain event bus (Redis pub/sub, in-memory for tests)
    - container: Service locator wiring marketplace services to their dependencies

This package enables:
    - Easy testing with in-memory implementations
    - Switching between providers without code changes
"""
