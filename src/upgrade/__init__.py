"""Save upgrade steps.

This package holds the step contract, the document tree walker, the
concrete schema transitions, and the registry that keys them by version.
"""
