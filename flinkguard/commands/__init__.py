from . import serve, validate

__all__ = ['serve', 'validate']
