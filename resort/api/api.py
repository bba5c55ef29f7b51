from fastapi import APIRouter
from resort.api.routes.public import router as public_router
from resort.api.routes.bookings import router as bookings_router
from resort.api.routes.auth import router as auth_router
from resort.api.routes.admin import router as admin_router
from resort.api.routes.chalets import router as chalets_router
from resort.api.routes.site_settings import router as settings_router
from resort.api.routes.users import router as users_router
from resort.api.routes.reports import router as reports_router

api_router = APIRouter(prefix="/api")
api_router.include_router(public_router)
api_router.include_router(bookings_router)
api_router.include_router(auth_router)
api_router.include_router(admin_router)
api_router.include_router(chalets_router)
api_router.include_router(settings_router)
api_router.include_router(users_router)
api_router.include_router(reports_router)
