"""Address book commands."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.address.address import Address
from storefront.domain import storefront
from storefront.exceptions import NotFoundError


@storefront.command(part_of="Address")
class RegisterAddress:
    customer_id = Identifier(required=True)
    name = String(required=True, max_length=150)
    phone = String(max_length=20)
    line1 = String(required=True, max_length=255)
    line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(max_length=100)


@storefront.command(part_of="Address")
class RemoveAddress:
    address_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@storefront.command_handler(part_of=Address)
class AddressBookHandler:
    @handle(RegisterAddress)
    def register(self, command):
        address = Address.register(
            customer_id=command.customer_id,
            name=command.name,
            phone=command.phone,
            line1=command.line1,
            line2=command.line2,
            city=command.city,
            state=command.state,
            postal_code=command.postal_code,
            country=command.country,
        )
        current_domain.repository_for(Address).add(address)
        return str(address.id)

    @handle(RemoveAddress)
    def remove(self, command):
        repo = current_domain.repository_for(Address)
        address = repo.get(command.address_id)
        if not address.belongs_to(command.customer_id):
            raise NotFoundError({"address": ["Address not found"]})
        repo._dao.delete(address)
