"""reposweep: discovery, prioritization and safety gates for review sweeps."""

__version__ = "0.1.0"
