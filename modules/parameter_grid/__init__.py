"""
Parameter Grid Module
=====================

Responsibility:
- Exhaustive enumeration of a Cartesian product of named value lists,
  or a union of several such products.
- O(#params) random access to any candidate without materializing the grid.
- Construction-time validation of the grid specification.
"""

from .parameter_grid import ParameterGrid, check_param_grid

__all__ = ['ParameterGrid', 'check_param_grid']
