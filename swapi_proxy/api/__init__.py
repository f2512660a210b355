from swapi_proxy.api.server import CharacterServer, create_app

__all__ = ["CharacterServer", "create_app"]
