from storefront.data.models import ProductModel
from storefront.data.seed import DEMO_PRODUCTS, seed


def test_seed_fills_empty_catalogue_once(db_session):
    assert seed() == len(DEMO_PRODUCTS)
    assert seed() == 0

    skus = {p.sku for p in db_session.query(ProductModel).all()}
    assert skus == {sku for _, _, _, sku in DEMO_PRODUCTS}
