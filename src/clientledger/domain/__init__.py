"""Domain layer for clientledger application."""

# Services are resolved lazily so that importing domain.entities from the
# database layer does not pull the services (and the database layer) back in.
_SERVICES = {
    "AggregationService": "clientledger.domain.aggregation",
    "CategoryService": "clientledger.domain.category",
    "ClientService": "clientledger.domain.client",
    "TransactionService": "clientledger.domain.transaction",
    "UploadService": "clientledger.domain.upload",
    "WebhookService": "clientledger.domain.webhook",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        import importlib

        module = importlib.import_module(_SERVICES[name])
        return getattr(module, name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
