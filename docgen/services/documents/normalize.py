"""
Record Normalization

Upstream aggregation steps emit report data either as an ordered sequence
of records or as a mapping keyed by class section / subject. Renderers only
ever see the uniform list-of-dicts shape produced here.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional

from .models import Marksheet


def normalize(raw: Any, key_field: str = 'key') -> list[dict]:
    """
    Normalize list-shaped or map-shaped data into a list of records.

    Mapping input becomes one record per entry, carrying the original key
    under key_field. Fields stored on the value override the key. Scalar
    values are wrapped as {key_field: key, 'value': value}.

    Args:
        raw: Sequence of records, mapping of records, or None
        key_field: Field name that receives mapping keys

    Returns:
        List of record dicts (empty for missing or unrecognised input)
    """
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        records = []
        for key, value in raw.items():
            if isinstance(value, Mapping):
                records.append({key_field: key, **value})
            else:
                records.append({key_field: key, 'value': value})
        return records
    if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        return [dict(item) for item in raw if isinstance(item, Mapping)]
    return []


class ReportData:
    """
    Tagged union over the two payload shapes.

    Use ReportData.from_raw() and then records() / as_mapping() rather than
    sniffing the payload shape at each call site.
    """

    def records(self, key_field: str = 'key') -> list[dict]:
        raise NotImplementedError

    def as_mapping(self) -> dict:
        raise NotImplementedError

    def __len__(self) -> int:
        return len(self.records())

    @staticmethod
    def from_raw(raw: Any) -> 'ReportData':
        if isinstance(raw, Mapping):
            return MappingData(dict(raw))
        if isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
            return SequenceData(list(raw))
        return SequenceData([])


@dataclass
class SequenceData(ReportData):
    items: list

    def records(self, key_field: str = 'key') -> list[dict]:
        return normalize(self.items, key_field)

    def as_mapping(self) -> dict:
        # A summary delivered as a one-element list
        for item in self.items:
            if isinstance(item, Mapping):
                return dict(item)
        return {}


@dataclass
class MappingData(ReportData):
    entries: dict

    def records(self, key_field: str = 'key') -> list[dict]:
        return normalize(self.entries, key_field)

    def as_mapping(self) -> dict:
        return dict(self.entries)


@dataclass
class SignatureSlot:
    """A resolved signature block slot"""

    label: str
    name: str
    image: Optional[str] = None


def resolve_signatories(marksheet: Marksheet) -> list[SignatureSlot]:
    """
    Resolve the staff and HOD signature slots of a marksheet.

    Signatures stored on the marksheet are refreshed by the regenerate flow
    and win over the signer's profile signature. Names fall back the same
    way, then to a placeholder.
    """
    staff = marksheet.staff
    hod = marksheet.hod
    return [
        SignatureSlot(
            label='Signature of Staff',
            name=marksheet.staff_name or (staff.name if staff else '') or 'Staff Name',
            image=marksheet.staff_signature or (staff.signature if staff else None),
        ),
        SignatureSlot(
            label='Signature of HOD',
            name=marksheet.hod_name or (hod.name if hod else '') or 'HOD Name',
            image=marksheet.hod_signature or (hod.signature if hod else None),
        ),
    ]
