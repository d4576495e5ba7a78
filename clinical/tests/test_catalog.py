import pytest

from clinical.models import Disease, Ward
from clinical.services import catalog as cat
from clinical.services.catalog import CatalogSnapshot, index_by_code, resolve


def _snapshot():
    return CatalogSnapshot.from_entries(
        ward=[Ward(code='M', description='Medical'), Ward(code='S', description='Surgery')],
        disease=[Disease(code='1', description='Malaria')],
    )


def test_resolve_is_exact_match():
    catalog = index_by_code([Ward(code='M', description='Medical')])
    assert resolve(catalog, 'M').description == 'Medical'
    assert resolve(catalog, 'm') is None
    assert resolve(catalog, ' M') is None
    assert resolve(catalog, '') is None
    assert resolve(catalog, None) is None


def test_snapshot_resolves_by_catalog_name():
    snap = _snapshot()
    assert snap.resolve(cat.WARD, 'S').description == 'Surgery'
    assert snap.resolve(cat.DISEASE, '1').description == 'Malaria'
    # same code, other catalog
    assert snap.resolve(cat.DISEASE, 'M') is None


def test_catalogs_not_given_are_empty():
    snap = _snapshot()
    assert snap.catalog(cat.OPERATION) == {}
    assert not snap.is_code_present(cat.DISCHARGE_TYPE, 'D')


def test_unknown_catalog_name():
    with pytest.raises(KeyError):
        _snapshot().catalog('beds')


def test_catalog_is_loaded_once():
    calls = []

    def load():
        calls.append(1)
        return [Ward(code='M', description='Medical')]

    snap = CatalogSnapshot({cat.WARD: load})
    assert snap.is_code_present(cat.WARD, 'M')
    assert snap.is_code_present(cat.WARD, 'M')
    assert len(calls) == 1


@pytest.mark.django_db
def test_default_snapshot_reads_tables():
    Ward.objects.create(code='W1', description='Ward one', beds=4)
    snap = CatalogSnapshot()
    assert snap.is_code_present(cat.WARD, 'W1')
    assert not snap.is_code_present(cat.WARD, 'W2')
