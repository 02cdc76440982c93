"""SVAC prevalence predictor package.

Cleans the SVAC conflict-actor dataset and World Bank indicators, joins them on
Gleditsch-Ward country codes, and compares library estimators for predicting
sexual-violence prevalence and sexual slavery reports.
"""

__all__ = [
    "constants",
    "crosswalk",
    "loader",
    "svac",
    "world_bank",
    "merge",
    "preprocessing",
    "evaluation",
    "bart",
    "ml_workflow",
]

__version__ = "0.1.0"
