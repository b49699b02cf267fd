import hmac

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.config.settings import Settings
from catalog.database.session import get_db_session
from catalog.services.product_service import ProductService

ADMIN_TOKEN_HEADER = "X-Admin-Token"


def get_app_settings(request: Request) -> Settings:
    # the Settings instance the app was created with
    return request.app.state.settings


async def get_product_service(
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
) -> ProductService:
    return ProductService(db, settings)


def is_admin(request: Request, settings: Settings = Depends(get_app_settings)) -> bool:
    """True when the request carries the configured admin token."""
    supplied = request.headers.get(ADMIN_TOKEN_HEADER)
    if not settings.ADMIN_TOKEN or not supplied:
        return False
    return hmac.compare_digest(supplied, settings.ADMIN_TOKEN)
