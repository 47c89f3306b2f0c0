import os

from dotenv import load_dotenv

load_dotenv()

BACKEND_ROOT = os.path.dirname(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
)


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class ServerConfig:
    """Server and storage settings read from the environment (.env supported)."""

    def __init__(self):
        self.host: str = os.getenv("HOST", "0.0.0.0")
        self.port: int = int(os.getenv("FAST_API_PORT", "8000"))
        self.reload: bool = _env_bool("RELOAD")
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

        self.data_dir: str = os.getenv(
            "CRM_DATA_DIR", os.path.join(BACKEND_ROOT, "resources", "data", "crm")
        )
        self.customers_file: str = os.getenv("CUSTOMERS_FILE", "customers.json")
        self.leads_file: str = os.getenv("LEADS_FILE", "leads.json")

        # Upper bound for a whole import batch
        self.import_timeout_secs: float = float(os.getenv("IMPORT_TIMEOUT_SECS", "60"))

    @property
    def customers_path(self) -> str:
        return os.path.join(self.data_dir, self.customers_file)

    @property
    def leads_path(self) -> str:
        return os.path.join(self.data_dir, self.leads_file)
