"""API v1 汇总路由：统一挂载所有版本化的子路由。"""

from fastapi import APIRouter

from app.packages.glossary.api.v1.endpoints import auth, exports, moderation, terms

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(terms.router)
api_router.include_router(moderation.router)
api_router.include_router(exports.router)
