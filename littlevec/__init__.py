"""A small in-memory vector database with a JSON interface for nearest-neighbour search."""

__version__ = "0.1.0"