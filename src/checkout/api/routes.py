"""FastAPI routes for the Checkout domain — carts and checkout sessions."""

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from protean.utils.globals import current_domain
from starlette.concurrency import run_in_threadpool

from checkout.api.identity import CartOwner, cart_owner, optional_identity
from checkout.api.schemas import AddCartItemRequest, CartResponse, UpdateCartItemRequest
from checkout.cart.cart import Cart
from checkout.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from checkout.cart.management import AttachGuestCart, ClearCart, CreateCart
from checkout.session.orchestrator import CheckoutOrchestrator
from checkout.session.ports import Identity
from checkout.session.schemas import CheckoutSessionResponse


def get_checkout_orchestrator() -> CheckoutOrchestrator:
    return CheckoutOrchestrator()


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post(
    "/create-session",
    response_model=CheckoutSessionResponse,
    responses={400: {"description": "Invalid body or empty cart"}, 401: {}, 500: {}},
)
async def create_checkout_session(
    request: Request,
    identity: Identity | None = Depends(optional_identity),
    orchestrator: CheckoutOrchestrator = Depends(get_checkout_orchestrator),
):
    """Authorize the payment and record a pending order for the shopper's cart.

    The body is read raw so malformed JSON is reported like any other
    invalid body rather than by FastAPI's own validation layer. The attempt
    blocks on the payment processor, so it runs in the threadpool.
    """
    body = await request.body()
    outcome = await run_in_threadpool(orchestrator.create_checkout_session, identity, body)
    if outcome.error is not None:
        return JSONResponse(status_code=outcome.error.status_code, content=outcome.error.to_payload())

    return CheckoutSessionResponse(client_secret=outcome.client_secret, order_id=outcome.order_id)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


def _find_cart(owner: CartOwner) -> Cart | None:
    repo = current_domain.repository_for(Cart)
    if owner.user_id:
        return repo.find_for_user(owner.user_id)
    return repo.find_for_session(owner.session_id)


def _find_or_create_cart_id(owner: CartOwner) -> str:
    cart = _find_cart(owner)
    if cart is not None:
        return str(cart.id)

    command = CreateCart(user_id=owner.user_id, session_id=None if owner.user_id else owner.session_id)
    return current_domain.process(command, asynchronous=False)


def _cart_response(owner: CartOwner) -> CartResponse:
    cart = _find_cart(owner)
    if cart is None:
        return CartResponse()
    return CartResponse(
        id=str(cart.id),
        items=cart.snapshot(),
        total=cart.total,
        item_count=cart.item_count,
    )


def _existing_cart_id(owner: CartOwner) -> str:
    cart = _find_cart(owner)
    if cart is None:
        raise HTTPException(status_code=404, detail="Cart not found")
    return str(cart.id)


@cart_router.get("", response_model=CartResponse)
async def get_cart(owner: CartOwner = Depends(cart_owner)) -> CartResponse:
    return _cart_response(owner)


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddCartItemRequest, owner: CartOwner = Depends(cart_owner)) -> CartResponse:
    command = AddToCart(
        cart_id=_find_or_create_cart_id(owner),
        product_id=body.product_id,
        variant_id=body.variant_id,
        name=body.name,
        unit_price_cents=body.price,
        creator_slug=body.creator_slug,
        quantity=body.quantity,
        image=body.image,
        variant_type=body.variant_type,
        variant_value=body.variant_value,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(owner)


@cart_router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str, body: UpdateCartItemRequest, owner: CartOwner = Depends(cart_owner)
) -> CartResponse:
    command = UpdateCartQuantity(
        cart_id=_existing_cart_id(owner),
        product_id=product_id,
        variant_id=body.variant_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(owner)


@cart_router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(
    product_id: str, variant_id: str | None = None, owner: CartOwner = Depends(cart_owner)
) -> CartResponse:
    command = RemoveFromCart(
        cart_id=_existing_cart_id(owner),
        product_id=product_id,
        variant_id=variant_id,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(owner)


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(owner: CartOwner = Depends(cart_owner)) -> CartResponse:
    cart = _find_cart(owner)
    if cart is not None:
        current_domain.process(ClearCart(cart_id=str(cart.id)), asynchronous=False)
    return _cart_response(owner)


@cart_router.post("/merge", response_model=CartResponse)
async def merge_guest_cart(owner: CartOwner = Depends(cart_owner)) -> CartResponse:
    """Fold the guest session's cart into the signed-in shopper's cart."""
    if not owner.user_id or not owner.session_id:
        raise HTTPException(status_code=400, detail="Both a user and a guest session are required")

    command = AttachGuestCart(user_id=owner.user_id, session_id=owner.session_id)
    current_domain.process(command, asynchronous=False)
    return _cart_response(owner)
