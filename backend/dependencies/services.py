"""
Request-scoped service dependencies. Tests replace these through app.dependency_overrides.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_db
from policy.identity import IdentityResolver
from policy.lifecycle import VendorLifecycle
from store import DocumentStore, SqlDocumentStore
from utils.credentials import CredentialProvider, supabase_credentials
from utils.storage import BlobStore, supabase_blob_store


async def get_store(db: AsyncSession = Depends(get_db)) -> DocumentStore:
    return SqlDocumentStore(db)


def get_credentials() -> CredentialProvider:
    return supabase_credentials


def get_blob_store() -> BlobStore:
    return supabase_blob_store


def get_lifecycle(
    store: DocumentStore = Depends(get_store),
    credentials: CredentialProvider = Depends(get_credentials)
) -> VendorLifecycle:
    return VendorLifecycle(store, credentials)


def get_identity_resolver(
    store: DocumentStore = Depends(get_store),
    credentials: CredentialProvider = Depends(get_credentials)
) -> IdentityResolver:
    return IdentityResolver(store, credentials)
