"""
Character catalog models.
"""

from pydantic import BaseModel, Field

UNKNOWN = "Unknown"


class Character(BaseModel):
    """A Star Wars character enriched with its homeworld."""

    uid: str
    name: str
    birth_year: str  # free-form upstream value, e.g. "19BBY"
    homeworld: str = UNKNOWN  # planet name, not its URL
    terrain: str = UNKNOWN


class CharacterListing(BaseModel):
    """One page (or one search) worth of characters."""

    characters: list[Character] = Field(default_factory=list)
    total_pages: int = 0

    @classmethod
    def empty(cls) -> "CharacterListing":
        return cls(characters=[], total_pages=0)
