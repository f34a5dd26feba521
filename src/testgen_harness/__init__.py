"""
testgen-harness

Drives a streaming test-generation service over a project, one source file at
a time, and records the coverage metrics of each run.
"""

__version__ = "0.1.0"
