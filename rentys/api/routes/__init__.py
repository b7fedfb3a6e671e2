from rentys.api.routes.auth import router as auth_router
from rentys.api.routes.profiles import router as profiles_router
from rentys.api.routes.rooms import router as rooms_router
from rentys.api.routes.requests import router as requests_router

__all__ = [
    "auth_router",
    "profiles_router",
    "rooms_router",
    "requests_router",
]
