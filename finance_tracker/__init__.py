"""
Finance Tracker - Source Package

Personal income/expense tracker on top of Supabase (data + auth) with a
Streamlit front end.

DESIGN PRINCIPLES:
1. The store owns the data and its ownership rules; the app never patches
   local copies, it refetches
2. Income and expense are two parallel tables; (kind, id) is the identity
3. Totals are Decimal, never float
4. Every failure becomes one visible message; nothing is retried
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
