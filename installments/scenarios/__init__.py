"""Scenarios for generating realistic installment portfolios."""

from installments.scenarios.portfolio import PortfolioScenario

__all__ = ["PortfolioScenario"]
