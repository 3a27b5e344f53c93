"""
Command-line interface
"""

from .main_cli import main

__all__ = ['main']
