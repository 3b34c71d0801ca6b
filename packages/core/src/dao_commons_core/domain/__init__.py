"""Domain-side configuration: entity descriptors and page windows."""

from .descriptor import EntityDescriptor
from .paging import PageWindow

__all__ = ["EntityDescriptor", "PageWindow"]
