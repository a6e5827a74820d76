"""Domain layer — filter grammar, sequence ordering, types, and models.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
