# Infrastructure clients
from clients.vault_client import VaultClient, get_valkey_url, get_backend_config
from clients.valkey_client import ValkeyClient

# Ticketing backend
from clients.backend_client import BackendClient, BackendError
from clients.loyalty_client import LoyaltyLedgerClient
from clients.payment_client import PaymentSessionClient
from clients.catalog_client import EventCatalogClient
