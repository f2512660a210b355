"""
SWAPI data source for Star Wars people and planets.
"""

from swapi_proxy.datasource.swapi import SwapiSource

__all__ = ["SwapiSource"]
