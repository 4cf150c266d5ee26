"""Feed parsers."""

from dropwatch_ingestion.parsers.base_parser import BaseParser
from dropwatch_ingestion.parsers.dropcatch_parser import DropFeedParser, resolve_column

__all__ = ["BaseParser", "DropFeedParser", "resolve_column"]
