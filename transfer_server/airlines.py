# airlines.py
# ---------------------------------------------------------------------
# Carriers customers type into the booking widget, by IATA code.
# Feel free to extend; the rest of the code never needs to change.

import re
from typing import Dict, Optional

from .errors import ValidationInputError

AIRLINE_CODES: Dict[str, str] = {
    # ==== BRAZIL ====
    "LA": "LATAM Airlines",
    "G3": "GOL Linhas Aereas",
    "AD": "Azul Linhas Aereas",
    "JJ": "LATAM Airlines Brasil",

    # ==== NORTH AMERICA ====
    "AA": "American Airlines",
    "DL": "Delta Air Lines",
    "UA": "United Airlines",
    "WN": "Southwest Airlines",
    "B6": "JetBlue Airways",
    "F9": "Frontier Airlines",
    "NK": "Spirit Airlines",
    "AS": "Alaska Airlines",
    "HA": "Hawaiian Airlines",

    # ==== EUROPE ====
    "BA": "British Airways",
    "LH": "Lufthansa",
    "AF": "Air France",
    "KL": "KLM Royal Dutch Airlines",
    "LX": "Swiss International Air Lines",
    "OS": "Austrian Airlines",
    "SN": "Brussels Airlines",
    "TP": "TAP Air Portugal",
    "FR": "Ryanair",
    "U2": "easyJet",
    "VY": "Vueling",
    "EW": "Eurowings",
    "TK": "Turkish Airlines",
    "SU": "Aeroflot",

    # ==== ASIA / PACIFIC ====
    "JL": "Japan Airlines",
    "NH": "All Nippon Airways",
    "KE": "Korean Air",
    "OZ": "Asiana Airlines",
    "SQ": "Singapore Airlines",
    "TG": "Thai Airways",
    "MH": "Malaysia Airlines",
    "CX": "Cathay Pacific",
    "CI": "China Airlines",
    "BR": "EVA Air",
    "GA": "Garuda Indonesia",
    "AI": "Air India",
    "PR": "Philippine Airlines",
    "5J": "Cebu Pacific",

    # ==== MIDDLE EAST / AFRICA ====
    "MS": "EgyptAir",
    "QR": "Qatar Airways",
    "EK": "Emirates",
    "EY": "Etihad Airways",
    "SV": "Saudia",
    "GF": "Gulf Air",
    "WY": "Oman Air",
    "RJ": "Royal Jordanian",
    "KU": "Kuwait Airways",
    "FZ": "flydubai",
    "AT": "Royal Air Maroc",
}

# Names (as typed) -> IATA code. Matched longest-first so "AMERICAN AIRLINES"
# wins over "AMERICAN".
AIRLINE_NAME_PREFIXES: Dict[str, str] = {
    "LATAM": "LA",
    "GOL": "G3",
    "AZUL": "AD",
    "TAM": "JJ",
    "AMERICAN AIRLINES": "AA",
    "AMERICAN": "AA",
    "DELTA AIRLINES": "DL",
    "DELTA": "DL",
    "UNITED AIRLINES": "UA",
    "UNITED": "UA",
    "SOUTHWEST": "WN",
    "JETBLUE": "B6",
    "FRONTIER": "F9",
    "SPIRIT": "NK",
    "ALASKA": "AS",
    "HAWAIIAN": "HA",
    "BRITISH AIRWAYS": "BA",
    "LUFTHANSA": "LH",
    "AIR FRANCE": "AF",
    "KLM": "KL",
    "SWISS": "LX",
    "AUSTRIAN": "OS",
    "BRUSSELS": "SN",
    "TAP": "TP",
    "RYANAIR": "FR",
    "EASYJET": "U2",
    "VUELING": "VY",
    "EUROWINGS": "EW",
    "TURKISH": "TK",
    "JAPAN AIRLINES": "JL",
    "JAL": "JL",
    "ANA": "NH",
    "KOREAN AIR": "KE",
    "ASIANA": "OZ",
    "SINGAPORE AIRLINES": "SQ",
    "SINGAPORE": "SQ",
    "THAI": "TG",
    "MALAYSIA": "MH",
    "CATHAY PACIFIC": "CX",
    "CHINA AIRLINES": "CI",
    "EVA AIR": "BR",
    "GARUDA": "GA",
    "AIR INDIA": "AI",
    "PHILIPPINE": "PR",
    "CEBU PACIFIC": "5J",
    "EGYPTAIR": "MS",
    "QATAR": "QR",
    "EMIRATES": "EK",
    "ETIHAD": "EY",
    "ROYAL AIR MAROC": "AT",
}

_NAMES_LONGEST_FIRST = sorted(AIRLINE_NAME_PREFIXES, key=len, reverse=True)

# LA3359, G31900, 5J123, AAL100, BA2490A; the airline prefix needs a letter
FLIGHT_IDENT_PATTERN = re.compile(r"^(?:[A-Z]{3}|[A-Z][A-Z0-9]|[0-9][A-Z])\d{1,5}[A-Z]?$")
_DIGITS_RE = re.compile(r"\d{1,5}[A-Z]?")
_NOISE_RE = re.compile(r"[\s\-_./]+")


def airline_name(iata: Optional[str]) -> Optional[str]:
    if not iata:
        return None
    return AIRLINE_CODES.get(iata.strip().upper())


def normalize_flight_number(raw: Optional[str]) -> str:
    """
    Turn what a customer typed into an IATA flight ident.

        "LATAM 3359" -> "LA3359"
        "g3-1900"    -> "G31900"
        "BA 2490"    -> "BA2490"

    Raises ValidationInputError when nothing usable is left.
    """
    original = (raw or "").strip().upper()
    if not original:
        raise ValidationInputError("flight_number is required")

    for name in _NAMES_LONGEST_FIRST:
        if original.startswith(name):
            remaining = _NOISE_RE.sub("", original[len(name):])
            m = _DIGITS_RE.match(remaining)
            if m and m.group(0) == remaining:
                return f"{AIRLINE_NAME_PREFIXES[name]}{remaining}"

    compact = _NOISE_RE.sub("", original)
    if FLIGHT_IDENT_PATTERN.match(compact):
        return compact

    raise ValidationInputError(f"Invalid flight number: {raw!r}")
