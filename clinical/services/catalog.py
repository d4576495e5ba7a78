"""
Reference catalog lookup.

A :class:`CatalogSnapshot` is built once per request and handed to the
admission validator.  Each catalog is loaded on first use into a
``code -> entity`` map; lookups are exact string matches, no trimming
and no case folding.
"""
from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional

from django.db.models import Model

from clinical.models import (
    AdmissionType,
    DeliveryResultType,
    DeliveryType,
    DischargeType,
    Disease,
    Operation,
    PregnantTreatmentType,
    Ward,
)

WARD = 'ward'
ADMISSION_TYPE = 'admission_type'
DISEASE = 'disease'
DISCHARGE_TYPE = 'discharge_type'
OPERATION = 'operation'
PREG_TREATMENT_TYPE = 'preg_treatment_type'
DELIVERY_TYPE = 'delivery_type'
DELIVERY_RESULT_TYPE = 'delivery_result_type'

CATALOG_MODELS = {
    WARD: Ward,
    ADMISSION_TYPE: AdmissionType,
    DISEASE: Disease,
    DISCHARGE_TYPE: DischargeType,
    OPERATION: Operation,
    PREG_TREATMENT_TYPE: PregnantTreatmentType,
    DELIVERY_TYPE: DeliveryType,
    DELIVERY_RESULT_TYPE: DeliveryResultType,
}


def index_by_code(entries: Iterable[Model]) -> Dict[str, Model]:
    return {entry.code: entry for entry in entries}


def resolve(catalog: Dict[str, Model], code: Optional[str]) -> Optional[Model]:
    """Return the entry whose code equals ``code`` exactly, or ``None``."""
    if code is None:
        return None
    return catalog.get(code)


class CatalogSnapshot:
    """Read-only view of the reference catalogs for one request.

    ``loaders`` maps a catalog name to a zero-argument callable returning
    the entries; by default every catalog is read from its model table.
    """

    def __init__(self, loaders: Optional[Dict[str, Callable[[], Iterable[Model]]]] = None):
        if loaders is None:
            loaders = {name: model.objects.all for name, model in CATALOG_MODELS.items()}
        self._loaders = loaders
        self._catalogs: Dict[str, Dict[str, Model]] = {}

    @classmethod
    def from_entries(cls, **entries: Iterable[Model]) -> 'CatalogSnapshot':
        """Snapshot over in-memory lists; catalogs not given are empty."""
        loaders = {name: (lambda items=tuple(entries.get(name, ())): items) for name in CATALOG_MODELS}
        return cls(loaders)

    def catalog(self, name: str) -> Dict[str, Model]:
        if name not in self._catalogs:
            try:
                loader = self._loaders[name]
            except KeyError:
                raise KeyError(f"unknown catalog: {name}") from None
            self._catalogs[name] = index_by_code(loader())
        return self._catalogs[name]

    def resolve(self, name: str, code: Optional[str]) -> Optional[Model]:
        return resolve(self.catalog(name), code)

    def is_code_present(self, name: str, code: Optional[str]) -> bool:
        return self.resolve(name, code) is not None
