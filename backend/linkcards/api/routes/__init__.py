from linkcards.api.routes import links

__all__ = [
    'links',
]
