from datetime import datetime, timezone
from decimal import Decimal
import uuid

import pytest
from sqlalchemy.exc import OperationalError

from storefront.data.models import CartModel, ProductModel
from storefront.domain.errors import NotFoundError
from storefront.services.cart_service import CartService


@pytest.fixture
def product(db_session):
    p = ProductModel(
        id=str(uuid.uuid4()),
        name="Keyboard",
        description="Tenkeyless",
        price=Decimal("10.00"),
        sku="KB-1",
        created_at=datetime.now(timezone.utc),
    )
    db_session.add(p)
    db_session.commit()
    return p


@pytest.fixture
def service(db_session):
    return CartService(db_session)


def test_get_cart_with_items_returns_none_for_unknown_session(service):
    assert service.get_cart_with_items("nobody") is None


def test_get_or_create_is_stable(service):
    first = service.get_or_create_cart("s1")
    second = service.get_or_create_cart("s1")

    assert first["id"] == second["id"]
    assert first["total_price"] == Decimal("0.00")


def test_add_item_sums_quantities(service, product):
    cart = service.get_or_create_cart("s1")

    for q in (3, 4, 5):
        item = service.add_item(cart["id"], product.id, q)

    assert item["quantity"] == 12
    data = service.get_cart_with_items("s1")
    assert len(data["items"]) == 1
    assert data["total_items"] == 12
    assert data["total_price"] == Decimal("120.00")


def test_add_item_rejects_non_positive_quantity(service, product):
    cart = service.get_or_create_cart("s1")

    with pytest.raises(ValueError):
        service.add_item(cart["id"], product.id, 0)


def test_totals_follow_current_price(service, product, db_session):
    cart = service.get_or_create_cart("s1")
    service.add_item(cart["id"], product.id, 2)

    product.price = Decimal("15.00")
    db_session.commit()

    data = service.get_cart_with_items("s1")
    assert data["total_price"] == Decimal("30.00")


def test_update_item_missing_raises_not_found(service):
    with pytest.raises(NotFoundError):
        service.update_item("ghost", 3)


def test_remove_and_clear(service, product):
    cart = service.get_or_create_cart("s1")
    item = service.add_item(cart["id"], product.id, 1)

    assert service.remove_item(item["id"]) == {"success": True}
    assert service.remove_item(item["id"]) == {"success": True}

    service.add_item(cart["id"], product.id, 2)
    assert service.clear_cart(cart["id"]) == {"success": True}
    assert service.get_cart_with_items("s1")["items"] == []


def test_add_item_falls_back_to_increment_when_insert_loses_race(service, product, monkeypatch):
    cart = service.get_or_create_cart("s1")
    service.add_item(cart["id"], product.id, 2)

    real_lookup = service.repo.get_cart_item
    calls = {"n": 0}

    def stale_lookup(cart_id, product_id):
        #first lookup misses the row another request already inserted
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real_lookup(cart_id, product_id)

    monkeypatch.setattr(service.repo, "get_cart_item", stale_lookup)

    item = service.add_item(cart["id"], product.id, 3)

    assert calls["n"] == 2
    assert item["quantity"] == 5
    data = service.get_cart_with_items("s1")
    assert len(data["items"]) == 1
    assert data["items"][0]["quantity"] == 5


def test_get_or_create_reuses_cart_created_concurrently(service, monkeypatch):
    existing = service.get_or_create_cart("s1")

    real_lookup = service.repo.get_cart_by_session
    calls = {"n": 0}

    def stale_lookup(session_id):
        calls["n"] += 1
        if calls["n"] == 1:
            return None
        return real_lookup(session_id)

    monkeypatch.setattr(service.repo, "get_cart_by_session", stale_lookup)

    cart = service.get_or_create_cart("s1")

    assert cart["id"] == existing["id"]
    assert calls["n"] == 2
    assert db_session_cart_count(service, "s1") == 1


def test_write_is_retried_after_operational_error(service, product, monkeypatch):
    cart = service.get_or_create_cart("s1")
    service.add_item(cart["id"], product.id, 1)

    real_clear = service.repo.clear_items
    calls = {"n": 0}

    def locked_once(cart_id):
        calls["n"] += 1
        if calls["n"] == 1:
            raise OperationalError("DELETE FROM cart_items", {}, Exception("database is locked"))
        return real_clear(cart_id)

    monkeypatch.setattr(service.repo, "clear_items", locked_once)

    assert service.clear_cart(cart["id"]) == {"success": True}
    assert calls["n"] == 2
    assert service.get_cart_with_items("s1")["items"] == []


def test_product_exists(service, product):
    assert service.product_exists(product.id) is True
    assert service.product_exists("ghost") is False


def db_session_cart_count(service, session_id):
    return service.repo.db.query(CartModel).filter(CartModel.session_id == session_id).count()
