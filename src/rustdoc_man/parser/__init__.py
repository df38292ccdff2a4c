"""rustdoc HTML scraping."""

from .html import Parser
from .members import AccumulatorState, MemberAccumulator

__all__ = ["AccumulatorState", "MemberAccumulator", "Parser"]
