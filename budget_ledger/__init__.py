"""
Budget Ledger - Core Package

A household budget ledger: income, expenses, savings, loans and goals
kept in one JSON document, with monthly and rolling summaries.

DESIGN PRINCIPLES:
1. One document, rewritten whole on every change
2. Only the ledger writes; everything else reads
3. Operations report failures, they never raise into the UI
4. Corrupt data is replaced visibly, never silently
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Budget Ledger Team"
