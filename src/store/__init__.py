"""Save archive storage layer.

This module reads and writes save archives and their metadata records.
It is the storage collaborator used by every upgrade step.
"""
