"""
Barter hub - reciprocal content-promotion engine.
"""
from .engine import BarterEngine, get_engine
from .storage import InMemoryStore, Store, Write

__all__ = ['BarterEngine', 'get_engine', 'InMemoryStore', 'Store', 'Write']
