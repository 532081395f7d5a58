"""Workflow interpreter.

This package holds first-class types for:
- Step and workflow definitions (declarative, read-only during a run)
- Placeholder interpolation and condition evaluation
- Single-step execution and the sequential engine
- Lifecycle events and the notification sink
- The run state machine and the predefined workflow catalog
"""

__all__: list[str] = []
