"""Force-directed layout."""

from .simulation import ForceSimulation

__all__ = ["ForceSimulation"]
