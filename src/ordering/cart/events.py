"""Domain events for the Cart aggregate."""

from protean.fields import Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Cart")
class CartCreated:
    """An empty cart was opened for a customer or an anonymous session."""

    cart_id = Identifier(required=True)
    customer_id = Identifier()
    session_id = String(max_length=255)


@ordering.event(part_of="Cart")
class CartItemAdded:
    """A product was added to the cart, or its quantity was topped up."""

    cart_id = Identifier(required=True)
    product_id = String(required=True)
    quantity_added = Integer(required=True)
    new_quantity = Integer(required=True)
    unit_price = Float(required=True)


@ordering.event(part_of="Cart")
class CartItemQuantityUpdated:
    """The quantity of a cart line was set to a new value."""

    cart_id = Identifier(required=True)
    product_id = String(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="Cart")
class CartItemRemoved:
    """A product line was removed from the cart."""

    cart_id = Identifier(required=True)
    product_id = String(required=True)


@ordering.event(part_of="Cart")
class CartDiscountApplied:
    cart_id = Identifier(required=True)
    amount = Float(required=True)


@ordering.event(part_of="Cart")
class CartTaxApplied:
    cart_id = Identifier(required=True)
    amount = Float(required=True)


@ordering.event(part_of="Cart")
class CartCleared:
    """All lines, discount and tax were removed (typically after checkout)."""

    cart_id = Identifier(required=True)
    items_removed = Integer(required=True)
