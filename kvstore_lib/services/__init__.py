from .container import ServiceContainer

__all__ = ["ServiceContainer"]
