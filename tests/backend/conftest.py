import pytest

from tests.helpers import dispose_storage, make_storage

TYPED_BACKENDS = ["memory", "plist", "preferences", "cloud", "vault"]
DYNAMIC_BACKENDS = ["memory", "plist", "preferences", "cloud"]


@pytest.fixture(params=TYPED_BACKENDS)
def typed_storage(request, tmp_path):
    storage = make_storage(request.param, tmp_path)
    yield storage
    dispose_storage(storage)


@pytest.fixture(params=DYNAMIC_BACKENDS)
def dynamic_storage(request, tmp_path):
    storage = make_storage(request.param, tmp_path)
    yield storage
    dispose_storage(storage)
