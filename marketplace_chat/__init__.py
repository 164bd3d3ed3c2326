"""Marketplace conversation manager backed by Supabase"""

__version__ = "0.1.0"
