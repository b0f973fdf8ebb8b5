"""
Logging Config Module
=====================

Responsibility:
- Root logger setup from the 'logging' config section.
- Colored console output and a rotating UTF-8 log file.
"""

from .logging_config import LoggingConfigurator, ColoredFormatter

__all__ = ['LoggingConfigurator', 'ColoredFormatter']
