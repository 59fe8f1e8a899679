"""
SQL template engine: parse ``%{...}`` placeholders and render them into SQL text.

Exports: SQLTemplateEngine, SQLFragment, parse, parse_parameters, quote_literal.
"""

from sqlweave.engines.sql.literals import quote_literal
from sqlweave.engines.sql.parser import parse, parse_parameters
from sqlweave.engines.sql.template_engine import SQLFragment, SQLTemplateEngine

__all__ = [
    "SQLTemplateEngine",
    "SQLFragment",
    "parse",
    "parse_parameters",
    "quote_literal",
]
