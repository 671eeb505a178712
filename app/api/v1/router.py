from fastapi import APIRouter

from app.api.v1.files import router as files_router
from app.api.v1.storage import router as storage_router

api_router = APIRouter()
api_router.include_router(files_router)
api_router.include_router(storage_router)
