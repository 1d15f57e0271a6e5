"""
In-memory stand-ins for the document store, credential provider and blob store
"""
from collections import defaultdict
from datetime import datetime, timezone
import copy
import uuid

from policy.errors import AlreadyExists, InvalidCredential, NotFound, StoreError
from store import DocumentStore
from utils.credentials import CredentialProvider
from utils.storage import BlobStore


def _matches(record, filter):
    for key, value in (filter or {}).items():
        if isinstance(value, (list, tuple, set, frozenset)):
            if record.get(key) not in value:
                return False
        elif record.get(key) != value:
            return False
    return True


class InMemoryDocumentStore(DocumentStore):
    def __init__(self):
        self.collections = defaultdict(dict)
        self.fail_reads = False
        self.fail_writes = False

    def seed(self, collection, **fields):
        """Insert a record synchronously and return its id"""
        now = datetime.now(timezone.utc)
        record_id = fields.pop("id", None) or str(uuid.uuid4())
        self.collections[collection][record_id] = {
            "id": record_id, "created_at": now, "updated_at": now, **fields
        }
        return record_id

    def raw(self, collection, record_id):
        return self.collections[collection].get(record_id)

    def _check_read(self):
        if self.fail_reads:
            raise StoreError()

    def _check_write(self):
        if self.fail_writes:
            raise StoreError()

    async def find_one(self, collection, filter):
        self._check_read()
        for record in self.collections[collection].values():
            if _matches(record, filter):
                return copy.deepcopy(record)
        return None

    async def find_many(self, collection, filter=None, order_by=None, descending=True, limit=None):
        self._check_read()
        records = [copy.deepcopy(r) for r in self.collections[collection].values() if _matches(r, filter)]
        if order_by:
            records.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by) or 0), reverse=descending)
        if limit:
            records = records[:limit]
        return records

    async def insert(self, collection, data):
        self._check_write()
        return self.seed(collection, **copy.deepcopy(dict(data)))

    async def update(self, collection, record_id, patch):
        self._check_write()
        record = self.collections[collection].get(record_id)
        if record is None:
            raise NotFound()
        record.update(copy.deepcopy(dict(patch)))
        record["updated_at"] = datetime.now(timezone.utc)

    async def delete(self, collection, record_id):
        self._check_write()
        if self.collections[collection].pop(record_id, None) is None:
            raise NotFound()


class FakeCredentialProvider(CredentialProvider):
    def __init__(self):
        self.accounts = {}
        self.deleted = []
        self.reset_requests = []

    def add_account(self, email, secret):
        provider_id = f"cred-{len(self.accounts) + 1}"
        self.accounts[email] = (provider_id, secret)
        return provider_id

    async def verify_credential(self, email, secret):
        account = self.accounts.get(email)
        if account is None or account[1] != secret:
            raise InvalidCredential()
        return account[0]

    async def create_credential(self, email, secret, metadata=None):
        if email in self.accounts:
            raise AlreadyExists("An account with this email already exists")
        return self.add_account(email, secret)

    async def delete_credential(self, provider_id):
        self.deleted.append(provider_id)

    async def send_password_reset(self, email):
        self.reset_requests.append(email)


class FakeBlobStore(BlobStore):
    def __init__(self):
        self.blobs = {}

    async def put_blob(self, path, content, content_type):
        self.blobs[path] = (content, content_type)
        return f"https://blobs.foodhub.in/{path}"
