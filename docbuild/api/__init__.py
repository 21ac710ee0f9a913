from . import builder

routers = [
    builder.router,
]

__all__ = [
    "routers",
]
