"""
Application Layer
=================

Use-cases orchestrating the domain services through ports.
"""

from history_fact_check.application.fact_check import FactCheckUseCase

__all__ = ["FactCheckUseCase"]
