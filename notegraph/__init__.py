"""notegraph - wiki-linked note graph with force-directed layout."""

__version__ = "0.1.0"
