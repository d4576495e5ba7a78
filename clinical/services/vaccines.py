from typing import List, Optional

import bleach
from django.db import IntegrityError, transaction

from clinical.exceptions import Conflict, NotFound, PersistenceFailure
from clinical.models import Vaccine, VaccineType


def list_vaccines(type_code: Optional[str] = None) -> List[Vaccine]:
    qs = Vaccine.objects.select_related('vaccine_type')
    if type_code:
        qs = qs.filter(vaccine_type__code=type_code)
    return list(qs.order_by('description', 'code'))


def find_vaccine(code: str) -> Optional[Vaccine]:
    return Vaccine.objects.select_related('vaccine_type').filter(code=code).first()


def is_code_used(code: str) -> bool:
    return Vaccine.objects.filter(code=code).exists()


def _vaccine_type_or_raise(type_code: str) -> VaccineType:
    vaccine_type = VaccineType.objects.filter(code=type_code).first()
    if vaccine_type is None:
        raise NotFound('Vaccine type not found!', field='vaccineType')
    return vaccine_type


def create_vaccine(*, code: str, description: str, type_code: str) -> Vaccine:
    vaccine_type = _vaccine_type_or_raise(type_code)
    try:
        with transaction.atomic():
            return Vaccine.objects.create(
                code=code,
                description=bleach.clean(description.strip(), strip=True),
                vaccine_type=vaccine_type,
            )
    except IntegrityError:
        raise Conflict('Vaccine already present!', field='code') from None


def update_vaccine(*, code: str, description: str, type_code: str) -> Vaccine:
    vaccine_type = _vaccine_type_or_raise(type_code)
    rows = Vaccine.objects.filter(code=code).update(
        description=bleach.clean(description.strip(), strip=True),
        vaccine_type=vaccine_type,
    )
    if not rows:
        raise NotFound('Vaccine is not updated!', field='code')
    return find_vaccine(code)


def delete_vaccine(code: str) -> bool:
    vaccine = find_vaccine(code)
    if vaccine is None:
        raise NotFound('Vaccine not found!', field='code')
    deleted, _ = vaccine.delete()
    if not deleted:
        raise PersistenceFailure('Vaccine is not deleted!')
    return True
