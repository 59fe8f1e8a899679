"""
Engines: SQL template parsing and rendering.
"""

from sqlweave.engines.sql import SQLFragment, SQLTemplateEngine, parse_parameters

__all__ = [
    "SQLTemplateEngine",
    "SQLFragment",
    "parse_parameters",
]
