import asyncio
import json
import os
from typing import Callable, Dict, List, Optional, Tuple

import aiofiles
from loguru import logger

from app.Core.Exceptions.errors import CustomerNotFoundError, DuplicatePhoneNumberError
from app.Domains.CRM.Models.customer import Customer
from app.Domains.CRM.Models.customer_query import CustomerQuery
from app.Domains.CRM.Repositories.customer_repository import CustomerRepository


class JsonCustomerRepository(CustomerRepository):
    """Customer store backed by a single JSON file.

    A phone-number index plus one asyncio lock make check-then-write atomic,
    so two concurrent imports can never both insert the same phone number.
    """

    def __init__(self, data_path: str):
        self.data_path = data_path
        self.customers: Dict[str, Customer] = {}
        self._phone_index: Dict[str, str] = {}
        self._lock = asyncio.Lock()
        self._ensure_file_exists()
        self._load_data()

    def _ensure_file_exists(self):
        directory = os.path.dirname(self.data_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        if not os.path.exists(self.data_path):
            self._save_data_sync()

    def _serialize(self) -> str:
        data = {
            "customers": [
                customer.model_dump(mode="json", by_alias=True)
                for customer in self.customers.values()
            ]
        }
        return json.dumps(data, indent=2)

    def _save_data_sync(self):
        with open(self.data_path, "w") as f:
            f.write(self._serialize())

    async def _save_data(self):
        # Write-then-rename so a cancelled or failed write leaves the old file intact
        tmp_path = f"{self.data_path}.tmp"
        async with aiofiles.open(tmp_path, "w") as f:
            await f.write(self._serialize())
        os.replace(tmp_path, self.data_path)

    def _load_data(self):
        try:
            with open(self.data_path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            # Refuse to start on a corrupt file rather than overwrite it
            logger.error(f"Customer store {self.data_path} is not valid JSON: {e}")
            raise

        for raw in data.get("customers", []):
            customer = Customer.model_validate(raw)
            self.customers[customer.id] = customer
            self._phone_index[customer.phone_number] = customer.id
        logger.info(f"Loaded {len(self.customers)} customers from {self.data_path}")

    async def insert_if_absent(self, customer: Customer) -> bool:
        async with self._lock:
            if customer.phone_number in self._phone_index:
                return False
            self.customers[customer.id] = customer.model_copy(deep=True)
            self._phone_index[customer.phone_number] = customer.id
            try:
                await self._save_data()
            except BaseException:
                # Keep memory consistent with disk when the write fails
                del self.customers[customer.id]
                del self._phone_index[customer.phone_number]
                raise
            return True

    async def get(self, customer_id: str) -> Optional[Customer]:
        customer = self.customers.get(customer_id)
        return customer.model_copy(deep=True) if customer else None

    async def get_by_phone(self, phone_number: str) -> Optional[Customer]:
        """Look a customer up by phone number.

        Not part of CustomerRepository: the pipeline deduplicates through
        insert_if_absent, so this exists for tests and ad-hoc inspection only.
        """
        customer_id = self._phone_index.get(phone_number)
        return await self.get(customer_id) if customer_id else None

    async def modify(
        self, customer_id: str, mutate: Callable[[Customer], Customer]
    ) -> Customer:
        async with self._lock:
            current = self.customers.get(customer_id)
            if current is None:
                raise CustomerNotFoundError()

            customer = mutate(current.model_copy(deep=True))
            customer.id = customer_id

            owner = self._phone_index.get(customer.phone_number)
            if owner is not None and owner != customer_id:
                raise DuplicatePhoneNumberError()

            previous_index = dict(self._phone_index)
            self._phone_index.pop(current.phone_number, None)
            self._phone_index[customer.phone_number] = customer_id
            self.customers[customer_id] = customer.model_copy(deep=True)
            try:
                await self._save_data()
            except BaseException:
                self.customers[customer_id] = current
                self._phone_index = previous_index
                raise
            return customer

    async def query(self, query: CustomerQuery) -> Tuple[List[Customer], int]:
        matches = [c for c in self.customers.values() if self._matches(c, query)]
        matches.sort(key=lambda c: c.created_at, reverse=True)
        page = matches[query.offset : query.offset + query.limit]
        return [c.model_copy(deep=True) for c in page], len(matches)

    @staticmethod
    def _matches(customer: Customer, query: CustomerQuery) -> bool:
        if query.status and customer.status != query.status:
            return False
        if query.category and customer.category != query.category:
            return False
        if query.country and customer.country != query.country:
            return False
        if query.source and customer.source != query.source:
            return False
        if query.search:
            needle = query.search.lower()
            haystack = (customer.name, customer.phone_number, customer.email or "")
            if not any(needle in value.lower() for value in haystack):
                return False
        return True

    async def delete(self, customer_id: str) -> bool:
        async with self._lock:
            customer = self.customers.pop(customer_id, None)
            if customer is None:
                return False
            self._phone_index.pop(customer.phone_number, None)
            await self._save_data()
            return True
