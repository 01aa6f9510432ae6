"""
Autoload generation: rule aggregation, scanning and class lookup.
"""
