import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from menuforge.config import settings
from menuforge.config.style_catalog import get_style_catalog
from menuforge.core.middleware import SecurityHeadersMiddleware, unhandled_exception_handler
from menuforge.modules.auth import routes as auth_routes
from menuforge.modules.profiles import routes as profiles_routes
from menuforge.modules.billing import routes as billing_routes
from menuforge.modules.uploads import routes as uploads_routes
from menuforge.modules.generations import routes as generations_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/api"

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    description="Turns uploaded restaurant menus into print-ready HTML designs",
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (auth_routes, profiles_routes, billing_routes, uploads_routes, generations_routes):
    app.include_router(module.router, prefix=API_PREFIX)


@app.on_event("startup")
async def startup_event():
    logger.info(f"{settings.app_name} starting ({settings.environment})")
    if settings.payment_required and not settings.stripe_secret_key:
        logger.warning("STRIPE_SECRET_KEY not configured - payment features will be disabled")
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY not configured - menu generation will fail")
    if not settings.supabase_service_role_key:
        logger.warning("SUPABASE_SERVICE_ROLE_KEY not configured - profile writes go through the anon client")
    if settings.enable_dev_subscription_bypass:
        logger.warning("Development subscription bypass is ENABLED. Never use this in production")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"{settings.app_name} shutting down")


@app.get("/")
async def root():
    return {"message": "Welcome to menuforge-backend", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness probe: extend here with Supabase/Stripe checks if needed."""
    return {"status": "ready"}


@app.get(f"{API_PREFIX}/config")
async def app_config():
    """Public pricing and payment switch for the client"""
    return {
        "payment_required": settings.payment_required,
        "activation_price": settings.activation_price_cents / 100,
        "credit_price": settings.credit_price_cents / 100,
    }


@app.get(f"{API_PREFIX}/styles")
async def style_catalog():
    """Themes, typography styles, layouts and page sizes for the generator wizard"""
    return get_style_catalog()
