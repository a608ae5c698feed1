from .container_repository import SQLAlchemyContainerRepository

__all__ = [
    "SQLAlchemyContainerRepository",
]
