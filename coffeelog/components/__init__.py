"""
Reusable UI components for Coffee Log.
"""

from .language_selector import render_language_selector, get_preferred_language

__all__ = ['render_language_selector', 'get_preferred_language']
