"""Address aggregate (CQRS): a customer's saved shipping address.

Orders never reference an Address; they copy it into a ShippingAddress
snapshot at placement time, so deleting an address does not affect orders.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront


@storefront.aggregate
class Address:
    customer_id = Identifier(required=True)
    name = String(required=True, max_length=150)
    phone = String(max_length=20)
    line1 = String(required=True, max_length=255)
    line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(max_length=100, default="India")
    created_at = DateTime()

    @classmethod
    def register(cls, customer_id, name, line1, city, state, postal_code, phone=None, line2=None, country=None):
        return cls(
            customer_id=customer_id,
            name=name,
            phone=phone,
            line1=line1,
            line2=line2,
            city=city,
            state=state,
            postal_code=postal_code,
            country=country or "India",
            created_at=datetime.now(UTC),
        )

    def belongs_to(self, customer_id) -> bool:
        return str(self.customer_id) == str(customer_id)


@storefront.repository(part_of=Address)
class AddressRepository:
    def for_customer(self, customer_id) -> list[Address]:
        return self._dao.query.filter(customer_id=str(customer_id)).order_by("-created_at").all().items
