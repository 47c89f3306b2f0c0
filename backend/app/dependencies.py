from typing import Optional

from app.Core.Config.server import ServerConfig
from app.Domains.CRM.Services.customer_service import CustomerService
from app.Domains.CRM.Services.import_service import ImportService
from app.Infrastructure.Repositories.json_customer_repository import JsonCustomerRepository
from app.Infrastructure.Repositories.json_lead_repository import JsonLeadRepository

server_config = ServerConfig()

# Singletons (Infrastructure). The customer store must be shared so its
# phone-number lock covers every request.
_customer_repository: Optional[JsonCustomerRepository] = None
_lead_repository: Optional[JsonLeadRepository] = None


def get_customer_repository() -> JsonCustomerRepository:
    global _customer_repository
    if _customer_repository is None:
        _customer_repository = JsonCustomerRepository(server_config.customers_path)
    return _customer_repository


def get_lead_repository() -> JsonLeadRepository:
    global _lead_repository
    if _lead_repository is None:
        _lead_repository = JsonLeadRepository(server_config.leads_path)
    return _lead_repository


def get_customer_service() -> CustomerService:
    return CustomerService(get_customer_repository())


def get_import_service() -> ImportService:
    return ImportService(
        get_customer_repository(),
        get_lead_repository(),
        timeout_secs=server_config.import_timeout_secs,
    )
