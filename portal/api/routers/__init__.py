"""API router package for endpoint composition."""

from .app_namespaces import api_create_app_namespaces_router
from .exports import api_create_exports_router
from .health import api_create_health_router
from .namespaces import api_create_namespaces_router

__all__ = [
	"api_create_app_namespaces_router",
	"api_create_exports_router",
	"api_create_health_router",
	"api_create_namespaces_router",
]
