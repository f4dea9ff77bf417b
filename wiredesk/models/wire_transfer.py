"""
Data structures for a wire transfer submission and its rendered letter.

A request is built once per submission, never mutated, and dropped once
the response has been sent.
"""
from dataclasses import dataclass, fields
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class WireTransferRequest:
    """
    A complete wire transfer submission.

    Attribute names follow the submitted JSON keys. Text fields that were
    not submitted are empty strings; ``amount`` is kept exactly as given
    and only interpreted when it is formatted.
    """
    amount: Any
    currency: str
    beneficiario: str
    dirBeneficiario: str
    bancoBeneficiario: str
    swiftBeneficiario: str
    ibanBeneficiario: str
    submitterName: str
    submitterEmail: str
    ref: str = ""
    date: str = ""
    dirBanco: str = ""
    bancoIntermediario: str = ""
    ciudadIntermediario: str = ""
    swiftIntermediario: str = ""
    aba: str = ""
    referencia: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WireTransferRequest":
        """
        Build a request from a validated mapping.

        Unknown keys are ignored. Missing or null text fields become "".
        """
        values: Dict[str, Any] = {}
        for f in fields(cls):
            raw = data.get(f.name)
            if f.name == "amount":
                values[f.name] = raw
            else:
                values[f.name] = "" if raw is None else str(raw)
        return cls(**values)


@dataclass(frozen=True)
class TableRow:
    """A label/value row of the letter table. ``value`` may hold line breaks."""
    label: str
    value: str


@dataclass(frozen=True)
class RenderedDocument:
    """A finished PDF letter."""
    content: bytes
    page_count: int

    @property
    def size(self) -> int:
        return len(self.content)
