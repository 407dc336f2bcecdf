"""Service layer — batch execution and ServiceResult-returning services.

Services may import from domain and infrastructure layers.
They must never import from commands or output.
"""
