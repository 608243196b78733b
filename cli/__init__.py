"""CLI package for bookswap"""
from .main import cli

__all__ = ['cli']
