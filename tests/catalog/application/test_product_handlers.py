"""Application tests for product command handlers and the listing projection."""

import pytest
from catalog.product.creation import AddProduct
from catalog.product.details import ChangeProductPrice, UpdateProductDetails
from catalog.product.product import Product
from catalog.product.status import DisableProduct, EnableProduct
from catalog.product.stock import DeductStock, ReceiveStock, RestoreStock
from catalog.projections.product_listing import ProductListing
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain


def _add_product(**overrides):
    defaults = {"sku": "TSHIRT-BLK-M", "name": "Classic Black T-Shirt", "price": 29.99, "quantity": 10}
    defaults.update(overrides)
    return current_domain.process(AddProduct(**defaults), asynchronous=False)


class TestAddProductHandler:
    def test_add_product(self):
        product_id = _add_product()
        product = current_domain.repository_for(Product).get(product_id)
        assert product.sku == "TSHIRT-BLK-M"
        assert product.quantity == 10

    def test_listing_projected(self):
        product_id = _add_product(special_price=24.99)
        listing = current_domain.repository_for(ProductListing).get(product_id)
        assert listing.final_price == 24.99
        assert listing.in_stock is True
        assert listing.status == "enabled"

    def test_out_of_stock_listing(self):
        product_id = _add_product(quantity=0)
        listing = current_domain.repository_for(ProductListing).get(product_id)
        assert listing.in_stock is False


class TestDetailsAndPriceHandlers:
    def test_update_details(self):
        product_id = _add_product()
        current_domain.process(
            UpdateProductDetails(product_id=product_id, name="Vintage Tee", description="Washed"),
            asynchronous=False,
        )
        listing = current_domain.repository_for(ProductListing).get(product_id)
        assert listing.name == "Vintage Tee"
        assert listing.slug == "vintage-tee"

    def test_change_price(self):
        product_id = _add_product()
        current_domain.process(
            ChangeProductPrice(product_id=product_id, price=19.99, special_price=15.0),
            asynchronous=False,
        )
        listing = current_domain.repository_for(ProductListing).get(product_id)
        assert listing.price == 19.99
        assert listing.final_price == 15.0


class TestStockHandlers:
    def test_receive_stock(self):
        product_id = _add_product(quantity=0)
        current_domain.process(ReceiveStock(product_id=product_id, quantity=7), asynchronous=False)

        product = current_domain.repository_for(Product).get(product_id)
        assert product.quantity == 7
        assert current_domain.repository_for(ProductListing).get(product_id).in_stock is True

    def test_deduct_stock(self):
        product_id = _add_product()
        current_domain.process(DeductStock(product_id=product_id, quantity=3), asynchronous=False)
        assert current_domain.repository_for(Product).get(product_id).quantity == 7

    def test_deduct_stock_beyond_quantity_rejected(self):
        product_id = _add_product(quantity=1)
        with pytest.raises(ValidationError):
            current_domain.process(DeductStock(product_id=product_id, quantity=2), asynchronous=False)

    def test_restore_stock(self):
        product_id = _add_product()
        current_domain.process(RestoreStock(product_id=product_id, quantity=2), asynchronous=False)
        assert current_domain.repository_for(Product).get(product_id).quantity == 12


class TestStatusHandlers:
    def test_disable_then_enable(self):
        product_id = _add_product()
        current_domain.process(DisableProduct(product_id=product_id), asynchronous=False)
        assert current_domain.repository_for(ProductListing).get(product_id).status == "disabled"

        current_domain.process(EnableProduct(product_id=product_id), asynchronous=False)
        assert current_domain.repository_for(Product).get(product_id).is_enabled
