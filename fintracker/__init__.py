"""
Personal Finance Tracker - Source Package

Analysis and intent-recognition core for a personal finance tracker:
rule-based insights over a transaction history, and a voice command
interpreter that turns spoken phrases into transaction actions.

DESIGN PRINCIPLES:
1. Insights are recomputed from the full transaction snapshot, never stored
2. Every rule is an independent pure function
3. Destructive voice commands are never executed without confirmation
4. Failures degrade to "no insight" / "no action taken"
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Personal Finance Tracker Team"
