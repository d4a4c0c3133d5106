"""Web framework adapters.

Import ``authtelemetry.adapters.frameworks.fastapi`` explicitly; it needs
the optional FastAPI dependency.
"""

from authtelemetry.adapters.frameworks.asgi import CorrelationMiddleware, create_asgi_app

__all__ = ["CorrelationMiddleware", "create_asgi_app"]
