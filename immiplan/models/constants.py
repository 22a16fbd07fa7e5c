"""Domain constants and enumerations for validation.

Currencies and categories stay plain sets/dicts (validated by the pydantic
models); the derived payment status is an Enum because API consumers filter
on it.
"""

from enum import Enum
from typing import Dict, Set

PIVOT_CURRENCY = "EUR"

CURRENCIES: Set[str] = {"BRL", "USD", "EUR"}

CURRENCY_SYMBOLS: Dict[str, str] = {
    "BRL": "R$",
    "USD": "$",
    "EUR": "€",
}

CURRENCY_LABELS: Dict[str, str] = {
    "BRL": "Real Brasileiro",
    "USD": "Dólar Americano",
    "EUR": "Euro",
}

# Babel locale used to group digits for each currency
CURRENCY_LOCALES: Dict[str, str] = {
    "BRL": "pt_BR",
    "USD": "en_US",
    "EUR": "de_DE",
}

CATEGORIES: Set[str] = {
    "Transporte",
    "Passagem",
    "Comida",
    "Lazer",
    "Reserva",
    "Vestimenta",
    "Documentação",
    "Acessório",
}


class PaymentStatus(str, Enum):
    NOT_PAID = "not_paid"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"
