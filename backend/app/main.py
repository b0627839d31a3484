import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.routers import coupon_rules, coupons

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

OPENAPI_TAGS = [
    {"name": "Coupons", "description": "Manage coupons, validate them at checkout and redeem them."},
    {"name": "Coupon Rules", "description": "Manage and lint rule-based coupon benefits."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Coupon and discount rules API for the storefront. "
        "Admins manage coupons and their buy-X-get-Y, percentage, fixed and bundle rules; "
        "checkout validates a coupon against the cart and redeems it once the order completes."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)

app.include_router(coupons.router, prefix="/v1/coupons", tags=["Coupons"])
app.include_router(coupon_rules.router, prefix="/v1/coupon_rules", tags=["Coupon Rules"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "status": "running",
    }
