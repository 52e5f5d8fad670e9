# storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.errors import NotFoundError
from storefront.domain.schemas import (
    CartItemOut,
    CartOut,
    CreateCartIn,
    ItemIn,
    ItemQuantityIn,
    SuccessOut,
)
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/api/cart", tags=["cart"])


def get_service(db: Session = Depends(get_db)):
    return CartService(db=db)


@router.post("", response_model=CartOut, status_code=201)
def create_cart(payload: CreateCartIn, svc: CartService = Depends(get_service)):
    return svc.get_or_create_cart(payload.session_id)


@router.put("/items/{item_id}", response_model=CartItemOut)
def update_item(item_id: str, payload: ItemQuantityIn, svc: CartService = Depends(get_service)):
    try:
        return svc.update_item(item_id, payload.quantity)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/items/{item_id}", response_model=SuccessOut)
def remove_item(item_id: str, svc: CartService = Depends(get_service)):
    return svc.remove_item(item_id)


@router.get("/{session_id}", response_model=CartOut)
def get_cart(session_id: str, svc: CartService = Depends(get_service)):
    return svc.get_or_create_cart(session_id)


@router.post("/{cart_id}/items", response_model=CartItemOut, status_code=201)
def add_item(
    cart_id: str,
    payload: ItemIn,
    svc: CartService = Depends(get_service),
):
    if not svc.cart_exists(cart_id):
        raise HTTPException(status_code=404, detail="Cart not found")
    if not svc.product_exists(payload.product_id):
        raise HTTPException(status_code=404, detail="Product not found")

    try:
        return svc.add_item(cart_id, payload.product_id, payload.quantity)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{cart_id}", response_model=SuccessOut)
def clear_cart(cart_id: str, svc: CartService = Depends(get_service)):
    return svc.clear_cart(cart_id)
