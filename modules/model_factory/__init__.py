"""
Model Factory Module
====================

Responsibility:
- Name-based registry of scikit-learn regressors and classifiers.
- Instantiation with constructor-argument filtering.
"""

from .model_factory import ModelFactory

__all__ = ['ModelFactory']
