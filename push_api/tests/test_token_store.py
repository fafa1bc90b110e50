# push_api/tests/test_token_store.py
import pytest

from push_api.services.token_store import FirestoreTokenStore

pytestmark = pytest.mark.asyncio


class _Snap:
    def __init__(self, doc):
        self._doc = doc
        self.exists = doc is not None

    def to_dict(self):
        return self._doc


class _FakeFirestore:
    """Lo mínimo de google.cloud.firestore.Client que usa el store."""

    def __init__(self, data):
        self.data = data
        self.paths = []

    def collection(self, name):
        self._col = name
        return self

    def document(self, uid):
        self._uid = uid
        return self

    def get(self):
        self.paths.append(f"{self._col}/{self._uid}")
        return _Snap(self.data.get(self._col, {}).get(self._uid))


@pytest.fixture
def firestore_client():
    return _FakeFirestore(
        {
            "users": {
                "u1": {"name": "Sin tokens"},
                "u2": {"fcmTokens": {"T1": {"platform": "android"}, "T2": {"platform": "ios"}}},
                "u3": {"fcmTokens": ["no", "es", "mapa"]},
            },
            "vecinos": {"v1": {"pushTokens": {"V1": True}}},
        }
    )


async def test_reads_token_map_keys(firestore_client):
    store = FirestoreTokenStore(client=firestore_client)
    assert await store.get_tokens("u2") == ["T1", "T2"]
    assert firestore_client.paths == ["users/u2"]


@pytest.mark.parametrize("uid", ["u1", "u3", "nadie"])
async def test_missing_or_malformed_is_empty(firestore_client, uid):
    store = FirestoreTokenStore(client=firestore_client)
    assert await store.get_tokens(uid) == []


async def test_collection_and_field_are_configurable(firestore_client):
    store = FirestoreTokenStore(client=firestore_client, collection="vecinos", field="pushTokens")
    assert await store.get_tokens("v1") == ["V1"]
