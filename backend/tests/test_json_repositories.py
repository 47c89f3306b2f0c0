import asyncio
import json

import pytest

from app.Core.Exceptions.errors import CustomerNotFoundError, DuplicatePhoneNumberError
from app.Domains.CRM.Models.customer import Customer, Note
from app.Domains.CRM.Models.customer_query import CustomerQuery
from app.Domains.CRM.Models.import_result import LeadFilters
from app.Infrastructure.Repositories.json_customer_repository import JsonCustomerRepository


def _customer(**overrides):
    data = {"name": "Jane", "phoneNumber": "555-0100", "source": "manual"}
    data.update(overrides)
    return Customer.model_validate(data)


@pytest.mark.asyncio
async def test_insert_if_absent_rejects_taken_phone(customer_repository):
    assert await customer_repository.insert_if_absent(_customer()) is True
    assert await customer_repository.insert_if_absent(_customer(name="Other")) is False

    stored = await customer_repository.get_by_phone("555-0100")
    assert stored.name == "Jane"


@pytest.mark.asyncio
async def test_customers_survive_reload_in_camel_case(tmp_path):
    path = tmp_path / "customers.json"
    repository = JsonCustomerRepository(str(path))
    customer = _customer(contactHistory=[{"type": "call", "notes": "left voicemail"}])
    await repository.insert_if_absent(customer)

    raw = json.loads(path.read_text())["customers"][0]
    assert raw["phoneNumber"] == "555-0100"
    assert raw["contactHistory"][0]["type"] == "call"

    reloaded = JsonCustomerRepository(str(path))
    again = await reloaded.get(customer.id)
    assert again.model_dump() == customer.model_dump()
    # The phone index is rebuilt on load
    assert await reloaded.insert_if_absent(_customer(name="Dup")) is False


def test_corrupt_store_refuses_to_load(tmp_path):
    path = tmp_path / "customers.json"
    path.write_text("{not json")
    with pytest.raises(json.JSONDecodeError):
        JsonCustomerRepository(str(path))
    assert path.read_text() == "{not json"


@pytest.mark.asyncio
async def test_modify_enforces_phone_uniqueness(customer_repository):
    first = _customer()
    second = _customer(name="Bob", phoneNumber="555-0200")
    await customer_repository.insert_if_absent(first)
    await customer_repository.insert_if_absent(second)

    def _set_phone(number):
        def _apply(customer):
            customer.phone_number = number
            return customer

        return _apply

    with pytest.raises(DuplicatePhoneNumberError):
        await customer_repository.modify(second.id, _set_phone("555-0100"))
    assert (await customer_repository.get(second.id)).phone_number == "555-0200"

    await customer_repository.modify(second.id, _set_phone("555-0300"))
    assert (await customer_repository.get_by_phone("555-0300")).name == "Bob"
    assert await customer_repository.get_by_phone("555-0200") is None
    # The released number can be taken again
    assert await customer_repository.insert_if_absent(_customer(phoneNumber="555-0200"))


@pytest.mark.asyncio
async def test_modify_missing_customer(customer_repository):
    with pytest.raises(CustomerNotFoundError):
        await customer_repository.modify("nope", lambda customer: customer)


@pytest.mark.asyncio
async def test_failed_mutation_leaves_customer_untouched(customer_repository):
    customer = _customer()
    await customer_repository.insert_if_absent(customer)

    def _explode(current):
        current.name = "Half-written"
        raise ValueError("boom")

    with pytest.raises(ValueError):
        await customer_repository.modify(customer.id, _explode)
    assert (await customer_repository.get(customer.id)).name == "Jane"


@pytest.mark.asyncio
async def test_concurrent_modifications_are_serialized(customer_repository):
    customer = _customer()
    await customer_repository.insert_if_absent(customer)

    def _append(text):
        def _apply(current):
            current.notes.append(Note(content=text))
            return current

        return _apply

    await asyncio.gather(
        *(customer_repository.modify(customer.id, _append(f"n{i}")) for i in range(5))
    )

    stored = await customer_repository.get(customer.id)
    assert sorted(note.content for note in stored.notes) == [f"n{i}" for i in range(5)]


@pytest.mark.asyncio
async def test_query_filters_search_and_pagination(customer_repository):
    await customer_repository.insert_if_absent(_customer(name="Alpha Dental", phoneNumber="1"))
    await customer_repository.insert_if_absent(
        _customer(name="Beta", phoneNumber="2", email="hello@ALPHA.io", status="won")
    )
    await customer_repository.insert_if_absent(_customer(name="Gamma", phoneNumber="3"))

    matches, total = await customer_repository.query(CustomerQuery(search="alpha"))
    assert total == 2
    assert {c.name for c in matches} == {"Alpha Dental", "Beta"}

    won, total = await customer_repository.query(CustomerQuery(status="won"))
    assert total == 1 and won[0].name == "Beta"

    page, total = await customer_repository.query(CustomerQuery(page=2, limit=2))
    assert total == 3
    assert len(page) == 1


@pytest.mark.asyncio
async def test_query_orders_newest_first(customer_repository):
    older = _customer(name="Old", phoneNumber="1", createdAt="2024-01-01T00:00:00")
    newer = _customer(name="New", phoneNumber="2", createdAt="2025-01-01T00:00:00")
    await customer_repository.insert_if_absent(older)
    await customer_repository.insert_if_absent(newer)

    customers, _ = await customer_repository.query(CustomerQuery())
    assert [c.name for c in customers] == ["New", "Old"]


@pytest.mark.asyncio
async def test_delete_releases_phone(customer_repository):
    customer = _customer()
    await customer_repository.insert_if_absent(customer)

    assert await customer_repository.delete(customer.id) is True
    assert await customer_repository.delete(customer.id) is False
    assert await customer_repository.insert_if_absent(_customer()) is True


@pytest.mark.asyncio
async def test_lead_store_missing_file_is_empty(lead_repository):
    assert await lead_repository.find() == []
    assert await lead_repository.count() == 0
    assert await lead_repository.first() is None


@pytest.mark.asyncio
async def test_lead_store_filters(lead_repository, leads_path):
    leads_path.write_text(
        json.dumps(
            {
                "leads": [
                    {"_id": "1", "name": "A", "country": "DE", "category": "pets"},
                    {"_id": "2", "name": "B", "country": "DE", "category": "cars"},
                    {"_id": "3", "name": "C", "country": "FR", "category": "pets"},
                ]
            }
        )
    )

    assert await lead_repository.count() == 3
    pets = await lead_repository.find(LeadFilters(category="pets"))
    assert [lead["name"] for lead in pets] == ["A", "C"]
    german_pets = await lead_repository.find(LeadFilters(country="DE", category="pets"))
    assert [lead["name"] for lead in german_pets] == ["A"]
    by_id = await lead_repository.find(LeadFilters(ids=["2", "3"]))
    assert [lead["name"] for lead in by_id] == ["B", "C"]
