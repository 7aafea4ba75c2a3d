"""Gym booking back end: trainer availability, free slots and booking lifecycle"""

__version__ = "1.0.0"
