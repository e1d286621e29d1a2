"""Use-case layer for the card workflow.

Each module coordinates domain objects and ports without performing transport
I/O directly, preserving the ports-and-adapters boundary. Errors are left to
propagate with their types; ``error_mapping`` turns them into display text.
"""
