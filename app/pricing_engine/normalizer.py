"""
Request normalization — the only place free-text input is interpreted.

Maps transaction-type synonyms to ``TxType``, free-text countries to
ISO2 codes and currency spellings to ISO codes before any rule is
compared. Matching code downstream only ever sees canonical values.
"""

from __future__ import annotations

import re
import unicodedata
from decimal import Decimal, InvalidOperation

from app.pricing_engine.config import MAX_AMOUNT
from app.pricing_engine.currency import normalize_currency
from app.pricing_engine.errors import InvalidInputError
from app.pricing_engine.snapshots import NormalizedRequest, TxType

# ---------------------------------------------------------------------------
# Alias tables
# ---------------------------------------------------------------------------

TX_TYPE_ALIASES: dict[str, TxType] = {
    "transfer": TxType.TRANSFER,
    "send": TxType.TRANSFER,
    "p2p": TxType.TRANSFER,
    "transfert": TxType.TRANSFER,
    "deposit": TxType.DEPOSIT,
    "cashin": TxType.DEPOSIT,
    "topup": TxType.DEPOSIT,
    "withdraw": TxType.WITHDRAW,
    "withdrawal": TxType.WITHDRAW,
    "cashout": TxType.WITHDRAW,
}

# Keys are upper-case and accent-stripped
COUNTRY_ALIASES_TO_ISO2: dict[str, str] = {
    # Europe
    "FRANCE": "FR", "FRENCH": "FR", "FRA": "FR",
    "BELGIQUE": "BE", "BELGIUM": "BE", "BEL": "BE",
    "ALLEMAGNE": "DE", "GERMANY": "DE", "DEU": "DE",
    "ESPAGNE": "ES", "SPAIN": "ES", "ESP": "ES",
    "ITALIE": "IT", "ITALY": "IT", "ITA": "IT",
    "SUISSE": "CH", "SWITZERLAND": "CH", "CHE": "CH",
    "ROYAUME UNI": "GB", "UNITED KINGDOM": "GB", "GBR": "GB",
    # North America
    "CANADA": "CA", "CAN": "CA",
    "USA": "US", "UNITED STATES": "US", "ETATS UNIS": "US",
    # West & Central Africa
    "COTE D'IVOIRE": "CI", "COTE D IVOIRE": "CI", "IVORY COAST": "CI", "CIV": "CI",
    "BURKINA FASO": "BF", "BURKINA": "BF", "BFA": "BF",
    "MALI": "ML", "MLI": "ML",
    "SENEGAL": "SN", "SEN": "SN",
    "CAMEROUN": "CM", "CAMEROON": "CM", "CMR": "CM",
    "TOGO": "TG", "TGO": "TG",
    "BENIN": "BJ", "BEN": "BJ",
    "NIGER": "NE", "NER": "NE",
    "GUINEE": "GN", "GUINEA": "GN", "GIN": "GN",
    "GABON": "GA", "GAB": "GA",
    "CONGO": "CG", "COG": "CG",
    "RDC": "CD", "RD CONGO": "CD", "DR CONGO": "CD", "COD": "CD",
    "MAROC": "MA", "MOROCCO": "MA", "MAR": "MA",
    "NIGERIA": "NG", "NGA": "NG",
}

_ISO2_RE = re.compile(r"^[A-Z]{2}$")
_NON_ALPHA_RE = re.compile(r"[^A-Z ]")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _clean(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")


def normalize_tx_type(value) -> TxType | None:
    """Resolve a transaction type or one of its synonyms, else ``None``."""
    raw = _clean(value)
    if not raw:
        return None
    return TX_TYPE_ALIASES.get(raw.lower())


def normalize_country(value) -> str | None:
    """
    Normalize a country to ISO2 where the alias table knows it.

    ISO2 input passes through. Unrecognized names come back upper-cased
    with punctuation collapsed, so rule authors can still target them.
    """
    raw = _strip_accents(_clean(value)).upper()
    if not raw:
        return None
    if _ISO2_RE.match(raw):
        return raw
    if raw in COUNTRY_ALIASES_TO_ISO2:
        return COUNTRY_ALIASES_TO_ISO2[raw]

    cleaned = " ".join(_NON_ALPHA_RE.sub(" ", raw).split())
    return COUNTRY_ALIASES_TO_ISO2.get(cleaned, cleaned) or None


def normalize_token(value) -> str | None:
    raw = _clean(value)
    return raw or None


def parse_amount(value) -> Decimal:
    """Parse *value* into a finite Decimal in (0, MAX_AMOUNT]."""
    if value is None or isinstance(value, bool):
        raise InvalidInputError("Invalid amount", {"amount": value})
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidInputError("Invalid amount", {"amount": str(value)})
    if not amount.is_finite() or amount <= 0:
        raise InvalidInputError("Invalid amount", {"amount": str(value)})
    if amount > MAX_AMOUNT:
        raise InvalidInputError(
            "Invalid amount", {"amount": str(value), "max": str(MAX_AMOUNT)},
        )
    return amount


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def normalize_request(raw: dict) -> NormalizedRequest:
    """
    Validate and canonicalize a raw quote request.

    *raw* accepts camelCase (``txType``, ``fromCurrency``...) or
    snake_case keys. Raises ``InvalidInputError`` for a missing or
    unparseable amount, currency or transaction type.
    """
    def pick(camel: str, snake: str):
        value = raw.get(camel)
        return raw.get(snake) if value is None else value

    amount = parse_amount(raw.get("amount"))

    from_currency = normalize_currency(pick("fromCurrency", "from_currency"))
    to_currency = normalize_currency(pick("toCurrency", "to_currency"))
    if not from_currency or not to_currency:
        raise InvalidInputError(
            "Missing currency",
            {"fromCurrency": from_currency or None, "toCurrency": to_currency or None},
        )

    raw_tx_type = pick("txType", "tx_type")
    tx_type = normalize_tx_type(raw_tx_type)
    if tx_type is None:
        message = "Missing txType" if not _clean(raw_tx_type) else "Unsupported txType"
        raise InvalidInputError(message, {"txType": raw_tx_type})

    provider = normalize_token(raw.get("provider"))

    return NormalizedRequest(
        tx_type=tx_type.value,
        amount=amount,
        from_currency=from_currency,
        to_currency=to_currency,
        country=normalize_country(raw.get("country")),
        operator=normalize_token(raw.get("operator")),
        provider=provider.lower() if provider else None,
    )
