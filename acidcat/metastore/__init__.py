from acidcat.metastore.client import MetastoreClient, MetastoreClientFactory
from acidcat.metastore.local import LocalMetastoreClient

__all__ = [
    "LocalMetastoreClient",
    "MetastoreClient",
    "MetastoreClientFactory",
]
