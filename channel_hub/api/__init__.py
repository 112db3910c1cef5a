"""
Backend API package initialization.

Router modules:
- validation: authoritative sub-channel overlap validation
- sub_channels: sub-channel directory (list, get, create, update, delete)
"""

from fastapi import APIRouter

from channel_hub.api.validation import router as validation_router
from channel_hub.api.sub_channels import router as sub_channels_router

api_router = APIRouter()

api_router.include_router(validation_router, tags=["validation"])
api_router.include_router(sub_channels_router, tags=["sub-channels"])  # sub_channels router has its own prefix

__all__ = [
    "api_router",
    "validation_router",
    "sub_channels_router",
]
