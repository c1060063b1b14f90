# Catalog module
from .subsonic import SubsonicClient

__all__ = ["SubsonicClient"]
