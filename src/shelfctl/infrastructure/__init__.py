"""Infrastructure layer — async database engine and catalog repositories.

This layer depends on stdlib and third-party libs (SQLAlchemy, aiosqlite)
plus the domain layer's value types and errors.
It must never import from services, commands, or output.
The service layer bridges between repository rows and API projections.
"""
