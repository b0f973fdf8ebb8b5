"""
Base Module
===========

Responsibility:
- Common engine scaffolding (config, logger, output directory).
- Capability interfaces for the collaborators the search consumes.
"""

from .base_engine import BaseEngine
from .protocols import Model, Scorer, Splitter

__all__ = ['BaseEngine', 'Model', 'Scorer', 'Splitter']
