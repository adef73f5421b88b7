from .base import ContentLookupProvider, ContentNotFoundError, ContentSearchProvider
from .memory import InMemoryContentCatalog

__all__ = ["ContentLookupProvider", "ContentNotFoundError", "ContentSearchProvider", "InMemoryContentCatalog"]
