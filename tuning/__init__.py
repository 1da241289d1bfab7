"""
Learning Rate Tuning Module.

Optuna grid search over learning rates, used to plot each lambda at its
best alpha.
"""

from tuning.alpha_search import AlphaSearchResult, create_objective, find_best_alpha

__all__ = [
    "AlphaSearchResult",
    "create_objective",
    "find_best_alpha",
]
