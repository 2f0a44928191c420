"""Infrastructure layer — document tree, render surface, filesystem, fetch.

This layer depends on stdlib and third-party libs (requests).
It must never import from services, commands, or output.
"""
