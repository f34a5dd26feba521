"""
Infrastructure Layer

Adapters for the generation service and the result table.
"""
