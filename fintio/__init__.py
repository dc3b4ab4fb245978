"""
Fintio Dashboard Client - Source Package

A personal-finance dashboard client that reads budgets, transactions,
accounts, subscriptions and savings goals from the Fintio REST backend.

DESIGN PRINCIPLES:
1. Every read and write is scoped by a budget
2. No budget, no request
3. Reads never raise into rendering code
4. Writes never fail silently
5. A successful write invalidates what it touched before returning
"""

__version__ = "1.0.0"
__author__ = "Fintio Team"
