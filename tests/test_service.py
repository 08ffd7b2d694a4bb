import pytest

from rs_compactor.errors import ServiceError, ServiceNotFound
from rs_compactor.service import REQUIRED_METHODS, StorageService, find_service, supports


class Partial:
    """Handle missing scheduleTask, like a storage bus without crafting."""

    def list_pattern_identifiers(self):
        return []

    def get_pattern(self, info):
        return None

    def get_item(self, ref):
        return None

    def is_connected(self):
        return True


class Advertising:
    def __init__(self, advertised):
        self.advertised = advertised

    def available_methods(self):
        if isinstance(self.advertised, Exception):
            raise self.advertised
        return self.advertised

    list_pattern_identifiers = Partial.list_pattern_identifiers
    get_pattern = Partial.get_pattern
    get_item = Partial.get_item
    is_connected = Partial.is_connected

    def schedule_task(self, info, quantity):
        return True


def test_fake_storage_conforms(fake_storage):
    service = fake_storage()
    assert supports(service)
    assert isinstance(service, StorageService)


def test_partial_handle_is_rejected():
    assert not supports(Partial())


def test_find_service_picks_first_conforming(fake_storage):
    good = fake_storage()
    other = fake_storage()
    assert find_service([Partial(), good, other]) is good


def test_find_service_without_candidates():
    with pytest.raises(ServiceNotFound):
        find_service([])


def test_find_service_none_conforming():
    with pytest.raises(ServiceNotFound, match="Refined Storage"):
        find_service([Partial(), object()])


def test_advertised_methods_must_cover_protocol():
    assert supports(Advertising(list(REQUIRED_METHODS)))
    assert not supports(Advertising([m for m in REQUIRED_METHODS if m != "schedule_task"]))


def test_unreachable_candidate_is_skipped(fake_storage):
    good = fake_storage()
    assert find_service([Advertising(ServiceError("connection refused")), good]) is good
