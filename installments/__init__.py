"""Installment contract lifecycle and payment amortization engine."""

__version__ = "0.1.0"
