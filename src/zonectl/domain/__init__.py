"""Domain layer — operations, names, roles, and the error taxonomy.

This layer depends only on stdlib, pydantic, and idna.
It must never import from services, infrastructure, commands, or config.
"""
