"""
Evaluation Package
==================

Contains the seed bank and evaluation harness for scoring agents.
"""

from sendem.evaluation.run_eval import baseline_act, evaluate_agent, load_seed_bank

__all__ = ["baseline_act", "evaluate_agent", "load_seed_bank"]
