import os

import pytest


@pytest.fixture(scope="session")
def _sales_domain(request):
    """Initialize the sales domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from sales.domain import sales

    sales.init()
    return sales


@pytest.fixture(scope="session", autouse=True)
def setup_db(_sales_domain):
    from shared.db import drop_db, setup_db

    setup_db(_sales_domain)

    yield

    drop_db(_sales_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_sales_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _sales_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


SHIPPING_ADDRESS = {
    "first_name": "Jane",
    "last_name": "Doe",
    "address_line_1": "123 Main St",
    "city": "Springfield",
    "postal_code": "62704",
    "country": "US",
}


@pytest.fixture()
def add_product():
    """Put a product into Sales' catalog read model, as Catalog's events would."""
    from protean import current_domain
    from sales.projections.catalog_product import CatalogProduct

    def _add(product_id="prod-001", sku="TSHIRT-BLK-M", name="Classic Black T-Shirt", price=50.0, **overrides):
        fields = {"quantity": 10, "track_inventory": True, "status": "enabled"}
        fields.update(overrides)
        current_domain.repository_for(CatalogProduct).add(
            CatalogProduct(product_id=product_id, sku=sku, name=name, price=price, **fields)
        )
        return product_id

    return _add


@pytest.fixture()
def cart_with_items(add_product):
    """An active customer cart holding ``quantity`` units of one product."""
    from protean import current_domain
    from sales.cart.items import AddToCart
    from sales.cart.management import CreateCart

    def _cart(quantity=2, customer_id="cust-001", **product):
        product_id = add_product(**product)
        cart_id = current_domain.process(CreateCart(customer_id=customer_id), asynchronous=False)
        current_domain.process(
            AddToCart(cart_id=cart_id, product_id=product_id, quantity=quantity),
            asynchronous=False,
        )
        return cart_id

    return _cart


@pytest.fixture()
def place_order(cart_with_items):
    """Check out a fresh cart and return the order id."""
    import json

    from protean import current_domain
    from sales.checkout.placement import PlaceOrder

    def _place(quantity=2, shipping_method="standard", **product):
        cart_id = cart_with_items(quantity=quantity, **product)
        return current_domain.process(
            PlaceOrder(
                cart_id=cart_id,
                customer_email="jane@example.com",
                shipping_address=json.dumps(SHIPPING_ADDRESS),
                shipping_method=shipping_method,
                payment_method="card",
            ),
            asynchronous=False,
        )

    return _place


@pytest.fixture()
def paid_order(place_order):
    """An order whose payment has been received (and so is processing)."""
    from protean import current_domain
    from sales.order.status import UpdatePaymentStatus

    def _paid(**kwargs):
        order_id = place_order(**kwargs)
        current_domain.process(UpdatePaymentStatus(order_id=order_id, payment_status="paid"), asynchronous=False)
        return order_id

    return _paid


@pytest.fixture()
def shipping_address():
    return dict(SHIPPING_ADDRESS)


@pytest.fixture()
def bulk_orders():
    """Store ``count`` one-line pending orders directly, skipping the cart."""
    from protean import current_domain
    from sales.order.order import Order

    def _bulk(count, customer_id="cust-bulk"):
        repo = current_domain.repository_for(Order)
        order_ids = []
        for index in range(count):
            order = Order.create(
                customer_email="bulk@example.com",
                items_data=[{"product_id": "prod-001", "sku": "TSHIRT-BLK-M", "name": "Tee", "price": 10.0, "quantity": 1}],
                shipping_address=dict(SHIPPING_ADDRESS),
                tax_amount=0.0,
                customer_id=customer_id,
                order_number=f"ORD-BULK-{index:05d}",
            )
            repo.add(order)
            order_ids.append(str(order.id))
        return order_ids

    return _bulk
