from .container import ContainerModel

__all__ = [
    "ContainerModel",
]
