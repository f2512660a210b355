"""
SWAPI proxy - cached character catalog in front of the Star Wars API.
"""

__version__ = "0.1.0"
