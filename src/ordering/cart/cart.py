"""Cart aggregate: the items a customer is assembling before checkout.

Lines are unique by product id. Adding a product that is already in the
cart tops up its quantity and keeps the price it was first added at. The
cart never touches storage; callers persist it through a repository after
each mutation.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, HasMany, Identifier, Integer, String, ValueObject

from ordering.cart.events import (
    CartCleared,
    CartCreated,
    CartDiscountApplied,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
    CartTaxApplied,
)
from ordering.domain import ordering
from ordering.errors import (
    CartItemNotFoundError,
    EmptyCartError,
    InvalidDiscountError,
    InvalidMoneyError,
    InvalidPriceError,
    InvalidQuantityError,
)
from ordering.shared.money import Money


def _check_quantity(quantity, allow_zero=False):
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError(f"Quantity must be an integer, got {quantity!r}", context={"quantity": quantity})
    if quantity < 0 or (quantity == 0 and not allow_zero):
        raise InvalidQuantityError(f"Invalid quantity: {quantity}", context={"quantity": quantity})


def _as_money(amount, error_cls=InvalidPriceError):
    if isinstance(amount, Money):
        return amount
    try:
        return Money.create(amount)
    except InvalidMoneyError as exc:
        raise error_cls(exc.message, context=exc.context) from exc


@ordering.entity(part_of="Cart")
class CartItem:
    product_id = String(required=True, max_length=255)
    name = String(required=True, max_length=255)
    unit_price = ValueObject(Money, required=True)
    quantity = Integer(required=True, min_value=1)
    image = String(max_length=1000)
    category = String(max_length=100)

    def subtotal(self) -> Money:
        return self.unit_price.multiply(self.quantity)


@ordering.aggregate
class Cart:
    customer_id = Identifier()  # Empty for anonymous carts
    session_id = String(max_length=255)
    items = HasMany(CartItem)
    discount = ValueObject(Money)
    tax = ValueObject(Money)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id=None, session_id=None):
        now = datetime.now(UTC)
        cart = cls(
            customer_id=customer_id,
            session_id=session_id,
            created_at=now,
            updated_at=now,
        )
        cart.raise_(
            CartCreated(
                cart_id=str(cart.id),
                customer_id=str(customer_id) if customer_id else None,
                session_id=session_id,
            )
        )
        return cart

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def find_item(self, product_id):
        return next((i for i in self.items if i.product_id == str(product_id)), None)

    def add_item(self, product_id, name, price, quantity=1, image=None, category=None):
        """Add a product to the cart, or increase its quantity if already present."""
        _check_quantity(quantity)
        unit_price = _as_money(price)

        existing = self.find_item(product_id)
        if existing:
            existing.quantity += quantity
            new_quantity = existing.quantity
            unit_price = existing.unit_price
        else:
            self.add_items(
                CartItem(
                    product_id=str(product_id),
                    name=name,
                    unit_price=unit_price,
                    quantity=quantity,
                    image=image,
                    category=category,
                )
            )
            new_quantity = quantity

        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product_id),
                quantity_added=quantity,
                new_quantity=new_quantity,
                unit_price=unit_price.value,
            )
        )

    def update_item_quantity(self, product_id, quantity):
        """Set a line's quantity. Zero removes the line."""
        _check_quantity(quantity, allow_zero=True)

        item = self._get_item(product_id)
        if quantity == 0:
            self.remove_item(product_id)
            return

        previous_quantity = item.quantity
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id):
        item = self._get_item(product_id)
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(cart_id=str(self.id), product_id=str(product_id)))

    def _get_item(self, product_id):
        item = self.find_item(product_id)
        if item is None:
            raise CartItemNotFoundError(
                f"Product {product_id} is not in the cart",
                context={"cart_id": str(self.id), "product_id": str(product_id)},
            )
        return item

    # -------------------------------------------------------------------
    # Adjustments
    # -------------------------------------------------------------------
    def apply_discount(self, amount):
        discount = _as_money(amount, error_cls=InvalidDiscountError)
        subtotal = self.calculate_subtotal()
        if discount.is_greater_than(subtotal):
            raise InvalidDiscountError(
                f"Discount {discount.value} exceeds cart subtotal {subtotal.value}",
                context={"discount": discount.value, "subtotal": subtotal.value},
            )

        self.discount = discount
        self.updated_at = datetime.now(UTC)
        self.raise_(CartDiscountApplied(cart_id=str(self.id), amount=discount.value))

    def apply_tax(self, amount):
        tax = _as_money(amount)
        self.tax = tax
        self.updated_at = datetime.now(UTC)
        self.raise_(CartTaxApplied(cart_id=str(self.id), amount=tax.value))

    # -------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------
    def calculate_subtotal(self) -> Money:
        subtotal = Money.zero()
        for item in self.items:
            subtotal = subtotal.add(item.subtotal())
        return subtotal

    def calculate_total(self) -> Money:
        subtotal = self.calculate_subtotal()
        discount = self.discount or Money.zero()
        # A discount may outlive the lines it was checked against
        if discount.is_greater_than(subtotal):
            discount = subtotal
        return subtotal.subtract(discount).add(self.tax or Money.zero())

    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    def is_empty(self) -> bool:
        return not self.items

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def validate_for_checkout(self):
        if self.is_empty():
            raise EmptyCartError("Cannot check out an empty cart", context={"cart_id": str(self.id)})

    def clear(self):
        removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)
        self.discount = None
        self.tax = None
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), items_removed=removed))
