"""
SilentRoll - confidential dice guessing on homomorphically encrypted state
"""

__version__ = "0.1.0"
