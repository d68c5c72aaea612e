"""Business constants read from the ``[custom]`` table of ``domain.toml``.

Every value has a code-level default so that a bare configuration still
prices carts and orders sensibly.
"""

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

DEFAULT_CURRENCY = "USD"
DEFAULT_TAX_RATE = 0.10
DEFAULT_INVOICE_DUE_DAYS = 30
DEFAULT_SHIPPING_METHODS = {"standard": 5.0, "express": 15.0}


def money(amount):
    """Round a monetary amount to cents."""
    return round(float(amount or 0.0), 2)


def _custom():
    return current_domain.config.get("custom") or {}


def currency():
    return _custom().get("currency", DEFAULT_CURRENCY)


def tax_rate():
    return float(_custom().get("tax_rate", DEFAULT_TAX_RATE))


def invoice_due_days():
    return int(_custom().get("invoice_due_days", DEFAULT_INVOICE_DUE_DAYS))


def shipping_methods():
    return _custom().get("shipping_methods") or DEFAULT_SHIPPING_METHODS


def shipping_cost(method, subtotal):
    """Price of ``method`` for a cart worth ``subtotal``.

    A positive ``free_shipping_threshold`` waives standard shipping once the
    subtotal reaches it. Express shipping is always charged.
    """
    methods = shipping_methods()
    if method not in methods:
        raise ValidationError({"shipping_method": [f"Unknown shipping method: {method}"]})

    threshold = float(_custom().get("free_shipping_threshold") or 0)
    if method == "standard" and threshold > 0 and subtotal >= threshold:
        return 0.0
    return money(methods[method])


def coupon_percentage(code):
    coupons = _custom().get("coupons") or {}
    normalized = (code or "").strip().upper()
    if normalized not in coupons:
        raise ValidationError({"coupon_code": [f"Invalid coupon code: {code}"]})
    return float(coupons[normalized])
