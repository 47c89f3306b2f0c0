from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from pydantic import ValidationError

from app.Core.Exceptions.errors import (
    CustomerNotFoundError,
    DuplicatePhoneNumberError,
    InvalidActionError,
    InvalidPayloadError,
    MissingFieldsError,
)
from app.Domains.CRM.Models.customer import ContactEntry, Customer, Note
from app.Domains.CRM.Models.customer_query import CustomerQuery
from app.Domains.CRM.Repositories.customer_repository import CustomerRepository

CREATE_REQUIRED_FIELDS = ("name", "phoneNumber", "country", "category")

EDITABLE_FIELDS = (
    "name",
    "phoneNumber",
    "email",
    "instagram",
    "address",
    "description",
    "country",
    "category",
    "status",
)

ACTIONS = ("update_status", "add_note", "add_contact")


def _validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"Invalid {location}: {first.get('msg')}" if location else first.get("msg", "Invalid")


def _revalidate(customer: Customer, changes: Dict[str, Any]) -> Customer:
    try:
        return Customer.model_validate({**customer.model_dump(by_alias=True), **changes})
    except ValidationError as e:
        raise InvalidPayloadError(_validation_message(e))


class CustomerService:
    def __init__(self, repository: CustomerRepository):
        self.repository = repository

    async def list_customers(self, query: CustomerQuery) -> Tuple[List[Customer], int]:
        return await self.repository.query(query)

    async def get_customer(self, customer_id: str) -> Customer:
        customer = await self.repository.get(customer_id)
        if not customer:
            raise CustomerNotFoundError()
        return customer

    async def create_customer(self, data: Dict[str, Any]) -> Customer:
        if any(not data.get(field) for field in CREATE_REQUIRED_FIELDS):
            raise MissingFieldsError()

        payload = {field: data.get(field) for field in EDITABLE_FIELDS if field != "status"}
        payload["source"] = data.get("source") or "manual"
        payload["status"] = "new"

        try:
            customer = Customer.model_validate(payload)
        except ValidationError as e:
            raise InvalidPayloadError(_validation_message(e))

        if not await self.repository.insert_if_absent(customer):
            raise DuplicatePhoneNumberError()

        logger.info(f"Created customer {customer.id} ({customer.phone_number})")
        return customer

    async def update_customer(self, customer_id: str, updates: Dict[str, Any]) -> Customer:
        changes = {k: v for k, v in updates.items() if k in EDITABLE_FIELDS and v is not None}

        def _apply(customer: Customer) -> Customer:
            updated = _revalidate(customer, changes)
            updated.touch()
            return updated

        saved = await self.repository.modify(customer_id, _apply)
        logger.info(f"Updated customer {customer_id}")
        return saved

    async def apply_action(
        self, customer_id: str, action: str, data: Optional[Dict[str, Any]] = None
    ) -> Customer:
        """Apply one PATCH action; each touches only the field it names.

        Appends run inside the repository's critical section, so concurrent
        notes or contact entries all land.
        """
        if action not in ACTIONS:
            raise InvalidActionError()

        data = data or {}

        try:
            if action == "add_note":
                note = Note(content=data.get("content"), created_by=data.get("createdBy"))
            elif action == "add_contact":
                entry = {
                    "type": data.get("type"),
                    "notes": data.get("notes"),
                    "createdBy": data.get("createdBy"),
                }
                if data.get("date"):
                    entry["date"] = data["date"]
                contact = ContactEntry.model_validate(entry)
        except ValidationError as e:
            raise InvalidPayloadError(_validation_message(e))

        def _apply(customer: Customer) -> Customer:
            if action == "update_status":
                customer = _revalidate(customer, {"status": data.get("status")})
            elif action == "add_note":
                customer.notes.append(note)
            else:
                customer.contact_history.append(contact)
                customer.last_contacted_at = datetime.utcnow()
            customer.touch()
            return customer

        saved = await self.repository.modify(customer_id, _apply)
        logger.info(f"Applied '{action}' to customer {customer_id}")
        return saved

    async def delete_customer(self, customer_id: str) -> None:
        if not await self.repository.delete(customer_id):
            raise CustomerNotFoundError()
        logger.info(f"Deleted customer {customer_id}")
