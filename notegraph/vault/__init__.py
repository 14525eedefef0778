"""Note loading, parsing and graph construction."""

from .graph import build_graph, title_index
from .loader import Vault, load_backup, load_vault
from .parser import extract_links, extract_tags, unique_tags

__all__ = [
    "build_graph",
    "title_index",
    "Vault",
    "load_backup",
    "load_vault",
    "extract_links",
    "extract_tags",
    "unique_tags",
]
