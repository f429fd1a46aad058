"""eviction_explorer package initializer.

This package contains the data loading, normalization and reactive state
modules behind the Shiny application.  See individual module docstrings
for details.
"""
