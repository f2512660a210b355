"""
Character catalog: assembly of single characters and listings over them.
"""

from swapi_proxy.characters.assembler import CHARACTER_TTL, CharacterAssembler
from swapi_proxy.characters.listing import CharacterListingService
from swapi_proxy.characters.models import Character, CharacterListing

__all__ = [
    "CHARACTER_TTL",
    "Character",
    "CharacterAssembler",
    "CharacterListing",
    "CharacterListingService",
]
