import json
import os
import tempfile

# Point the default stores at a throwaway directory before the app is imported
os.environ.setdefault("CRM_DATA_DIR", tempfile.mkdtemp(prefix="crm-test-"))

import pytest
from fastapi.testclient import TestClient

from app.dependencies import (
    get_customer_repository,
    get_customer_service,
    get_import_service,
    get_lead_repository,
)
from app.Domains.CRM.Services.customer_service import CustomerService
from app.Domains.CRM.Services.import_service import ImportService
from app.Infrastructure.Repositories.json_customer_repository import JsonCustomerRepository
from app.Infrastructure.Repositories.json_lead_repository import JsonLeadRepository
from main import app


@pytest.fixture
def customer_repository(tmp_path):
    return JsonCustomerRepository(str(tmp_path / "customers.json"))


@pytest.fixture
def leads_path(tmp_path):
    return tmp_path / "leads.json"


@pytest.fixture
def write_leads(leads_path):
    """Write raw lead documents the way the crawler stores them."""

    def _write(leads):
        leads_path.write_text(json.dumps(leads))

    return _write


@pytest.fixture
def lead_repository(leads_path):
    return JsonLeadRepository(str(leads_path))


@pytest.fixture
def import_service(customer_repository, lead_repository):
    return ImportService(customer_repository, lead_repository, timeout_secs=5)


@pytest.fixture
def customer_service(customer_repository):
    return CustomerService(customer_repository)


@pytest.fixture
def client(customer_repository, lead_repository, import_service, customer_service):
    app.dependency_overrides[get_customer_repository] = lambda: customer_repository
    app.dependency_overrides[get_lead_repository] = lambda: lead_repository
    app.dependency_overrides[get_import_service] = lambda: import_service
    app.dependency_overrides[get_customer_service] = lambda: customer_service
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()
