"""Gateways to external collaborators (object storage, classification service)."""

from clientledger.services.classifier import ClassifierNotifier
from clientledger.services.storage import SignedUpload, StorageGateway, SupabaseStorage

__all__ = ["ClassifierNotifier", "SignedUpload", "StorageGateway", "SupabaseStorage"]
