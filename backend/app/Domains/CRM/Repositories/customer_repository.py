from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

from app.Domains.CRM.Models.customer import Customer
from app.Domains.CRM.Models.customer_query import CustomerQuery


class CustomerRepository(ABC):
    @abstractmethod
    async def insert_if_absent(self, customer: Customer) -> bool:
        """Atomically insert unless a customer with the same phone number exists.

        Returns True when inserted, False when the phone number is already taken.
        """
        pass

    @abstractmethod
    async def get(self, customer_id: str) -> Optional[Customer]:
        pass

    @abstractmethod
    async def modify(
        self, customer_id: str, mutate: Callable[[Customer], Customer]
    ) -> Customer:
        """Apply ``mutate`` to a copy of the stored customer and persist the result.

        The read, the mutation and the write form one critical section, so
        concurrent appends to notes or contact history are never lost. Errors
        raised by ``mutate`` leave the stored customer untouched.

        Raises CustomerNotFoundError if absent, DuplicatePhoneNumberError on phone collision.
        """
        pass

    @abstractmethod
    async def query(self, query: CustomerQuery) -> Tuple[List[Customer], int]:
        """Return one page of matching customers plus the total match count."""
        pass

    @abstractmethod
    async def delete(self, customer_id: str) -> bool:
        pass
