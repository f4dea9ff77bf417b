"""
Fixed wording of the wire transfer letter.

The letter is addressed to the bank in Spanish. None of this text comes
from the request; it is loaded once and shared by every render.
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class LetterTemplate:
    """Static prose and ordering-party details printed on every letter."""

    ordering_party: str = "Verdi Square Asset Management SL"
    ordering_account: str = "ES63 0128 0892 5701 0005 3572"

    salutation: str = "Estimados Srs:"
    body: str = (
        "Por medio de la presente les solicito que por favor gestionen una "
        "transferencia bancaria según los siguientes datos:"
    )

    closing_lines: Tuple[str, ...] = (
        "Agradecemos que esta transferencia se gestione lo más rápido posible.",
        "Cualquier cosa, por favor no duden en avisar.",
        "Muchas gracias,",
    )

    signature_rule: str = "_________________________________"
    signature_lines: Tuple[str, ...] = (
        "Administrador Único",
        "Verdi Square Asset Management",
    )

    # Table labels, in row order
    label_ordering_party: str = "Ordenante"
    label_ordering_account: str = "Cuenta del ordenante"
    label_amount: str = "Importe y divisa"
    label_beneficiary: str = "Beneficiario"
    label_beneficiary_account: str = "Cuenta del beneficiario"
    label_beneficiary_address: str = "Dirección completa del beneficiario"
    label_bank_address: str = "Dirección completa del banco del beneficiario"


DEFAULT_TEMPLATE = LetterTemplate()
