from .base import Base

# import models so metadata.create_all can discover mappers
from .participant import Participant  # noqa: F401

__all__ = [
    "Base",
    "Participant",
]
