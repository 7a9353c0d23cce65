"""Creator storefront checkout API.

Web server that processes cart commands and checkout sessions synchronously
via HTTP. Requests under the cart and checkout prefixes are wrapped in the
checkout domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from domain.toml.
from checkout.domain import checkout  # noqa: E402
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

checkout.init()

# ---------------------------------------------------------------------------
# Route-to-domain mapping
# ---------------------------------------------------------------------------
_ROUTE_DOMAIN_MAP = {
    "/cart": checkout,
    "/checkout": checkout,
}


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    for prefix, domain in _ROUTE_DOMAIN_MAP.items():
        if path.startswith(prefix):
            return domain
    return None


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
def create_app() -> FastAPI:
    app = FastAPI(
        title="Creator Storefront Checkout API",
        description="Cart and checkout order creation",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the checkout domain context for cart and checkout requests."""
        domain = _resolve_domain(request.url.path)
        if domain is not None:
            with domain.domain_context():
                response = await call_next(request)
            return response
        # No domain match — pass through (health check, docs, etc.)
        return await call_next(request)

    register_exception_handlers(app)

    from checkout.api.routes import cart_router, checkout_router

    app.include_router(cart_router)
    app.include_router(checkout_router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domains": {"checkout": {"name": checkout.name}}})

    return app


app = create_app()
