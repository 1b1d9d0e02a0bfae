"""Referentiel vehicule statique -- marques, modeles, prix de base et fiabilite.

Toutes les tables sont des donnees : l'extracteur et le scoring les parcourent,
aucune logique specifique a une marque ou a un site n'est codee en dur ailleurs.
"""

import logging
import re

logger = logging.getLogger(__name__)

DEFAULT_MAKE = "Toyota"
DEFAULT_MODEL = "Camry"
DEFAULT_BASE_PRICE = 25000
DEFAULT_BASE_MILEAGE = 45000

# Ordre significatif : la premiere marque trouvee dans le texte l'emporte.
MAKES: tuple[str, ...] = (
    "Toyota",
    "Honda",
    "Ford",
    "BMW",
    "Mercedes",
    "Audi",
    "Lexus",
    "Nissan",
    "Chevrolet",
    "Dodge",
    "Jeep",
    "Hyundai",
    "Kia",
    "Mazda",
    "Subaru",
    "Volkswagen",
    "Volvo",
    "Acura",
    "Infiniti",
    "Buick",
    "Cadillac",
    "Lincoln",
    "Chrysler",
    "Pontiac",
    "Saturn",
    "Scion",
    "Mitsubishi",
    "Suzuki",
    "Fiat",
    "Alfa Romeo",
    "Jaguar",
    "Land Rover",
    "Mini",
    "Smart",
    "Tesla",
    "Rivian",
    "Lucid",
    "Polestar",
)

# Alias courants -> nom canonique du catalogue
BRAND_ALIASES: dict[str, str] = {
    "mercedes-benz": "Mercedes",
    "mercedes benz": "Mercedes",
    "chevy": "Chevrolet",
    "vw": "Volkswagen",
    "alfa-romeo": "Alfa Romeo",
    "land-rover": "Land Rover",
    "range rover": "Land Rover",
}

MODELS_BY_MAKE: dict[str, tuple[str, ...]] = {
    "Toyota": (
        "Camry",
        "Corolla",
        "Prius",
        "RAV4",
        "Highlander",
        "Tacoma",
        "Tundra",
        "Sienna",
        "Avalon",
        "Venza",
    ),
    "Honda": (
        "Civic",
        "Accord",
        "CR-V",
        "Pilot",
        "Odyssey",
        "HR-V",
        "Passport",
        "Ridgeline",
        "Insight",
        "Clarity",
    ),
    "Ford": (
        "F-150",
        "F-250",
        "F-350",
        "Mustang",
        "Explorer",
        "Escape",
        "Edge",
        "Expedition",
        "Ranger",
        "Bronco",
    ),
    "BMW": ("3 Series", "5 Series", "X3", "X5", "X7", "M3", "M5", "i3", "i4", "iX"),
    "Mercedes": (
        "C-Class",
        "E-Class",
        "S-Class",
        "GLC",
        "GLE",
        "GLS",
        "AMG",
        "CLA",
        "CLS",
        "GLA",
    ),
    "Audi": ("A3", "A4", "A6", "Q3", "Q5", "Q7", "e-tron"),
    "Lexus": ("ES", "IS", "RX", "NX", "GX"),
    "Nissan": ("Altima", "Sentra", "Rogue", "Pathfinder", "Frontier", "Leaf"),
    "Chevrolet": ("Silverado", "Malibu", "Equinox", "Tahoe", "Camaro", "Bolt"),
    "Dodge": ("Charger", "Challenger", "Durango", "Ram"),
    "Jeep": ("Wrangler", "Grand Cherokee", "Cherokee", "Compass", "Gladiator"),
    "Hyundai": ("Elantra", "Sonata", "Tucson", "Santa Fe", "Kona", "Ioniq"),
    "Kia": ("Forte", "Optima", "K5", "Sorento", "Sportage", "Telluride", "Soul"),
    "Mazda": ("Mazda3", "Mazda6", "CX-5", "CX-30", "CX-9", "MX-5"),
    "Subaru": ("Outback", "Forester", "Crosstrek", "Impreza", "WRX", "Ascent"),
    "Volkswagen": ("Jetta", "Passat", "Golf", "Tiguan", "Atlas"),
    "Volvo": ("S60", "XC40", "XC60", "XC90"),
    "Acura": ("TLX", "ILX", "RDX", "MDX"),
    "Infiniti": ("Q50", "QX50", "QX60"),
    "Buick": ("Encore", "Enclave", "Regal"),
    "Cadillac": ("Escalade", "CT5", "XT5"),
    "Lincoln": ("Navigator", "Aviator", "Corsair"),
    "Chrysler": ("Pacifica", "300"),
    "Pontiac": ("G6", "Vibe", "Grand Prix"),
    "Saturn": ("Vue", "Ion", "Aura"),
    "Scion": ("tC", "xB", "FR-S"),
    "Mitsubishi": ("Outlander", "Lancer", "Eclipse Cross", "Mirage"),
    "Suzuki": ("Swift", "Vitara", "SX4"),
    "Fiat": ("500", "500X", "Panda"),
    "Alfa Romeo": ("Giulia", "Stelvio"),
    "Jaguar": ("F-Pace", "XF", "XE", "F-Type"),
    "Land Rover": ("Defender", "Discovery", "Range Rover"),
    "Mini": ("Cooper", "Countryman", "Clubman"),
    "Smart": ("Fortwo", "Forfour"),
    "Tesla": ("Model 3", "Model Y", "Model S", "Model X", "Cybertruck"),
    "Rivian": ("R1T", "R1S"),
    "Lucid": ("Air", "Gravity"),
    "Polestar": ("Polestar 2", "Polestar 3"),
}

# Prix de base (USD) pour la synthese de repli depuis l'URL.
BASE_PRICES: dict[tuple[str, str], int] = {
    ("Toyota", "Camry"): 25000,
    ("Toyota", "Tacoma"): 35000,
    ("Toyota", "RAV4"): 28000,
    ("Toyota", "Corolla"): 22000,
    ("Honda", "Civic"): 22000,
    ("Honda", "Accord"): 24000,
    ("Honda", "CR-V"): 28000,
    ("Honda", "Pilot"): 35000,
    ("Ford", "F-150"): 45000,
    ("Ford", "Mustang"): 30000,
    ("Ford", "Explorer"): 35000,
    ("Ford", "Escape"): 25000,
    ("BMW", "3 Series"): 35000,
    ("BMW", "5 Series"): 55000,
    ("BMW", "X3"): 45000,
    ("BMW", "X5"): 65000,
    ("Mercedes", "C-Class"): 45000,
    ("Mercedes", "E-Class"): 55000,
    ("Mercedes", "S-Class"): 95000,
    ("Mercedes", "GLC"): 45000,
}

# Fiabilite percue par marque, echelle 1-10 (5 = neutre).
RELIABILITY_SCORES: dict[str, int] = {
    "Toyota": 8,
    "Honda": 8,
    "Lexus": 9,
    "Mazda": 7,
    "Subaru": 7,
    "BMW": 5,
    "Mercedes": 5,
    "Audi": 4,
    "Volkswagen": 4,
    "Ford": 6,
    "Chevrolet": 5,
    "Dodge": 3,
    "Jeep": 3,
    "Nissan": 5,
    "Hyundai": 6,
    "Kia": 6,
    "Acura": 7,
    "Infiniti": 5,
    "Buick": 6,
    "Cadillac": 4,
    "Lincoln": 5,
}
NEUTRAL_RELIABILITY = 5

DESIRABLE_LOCATIONS: tuple[str, ...] = (
    "los angeles",
    "san francisco",
    "san diego",
    "new york",
    "chicago",
    "miami",
    "seattle",
    "portland",
    "denver",
    "austin",
    "dallas",
    "houston",
    "phoenix",
    "las vegas",
    "atlanta",
    "boston",
    "washington",
)

_SEPARATORS_RE = re.compile(r"(?:%20|[\s\-_+/.,=?&:])+")


def normalize_text(text: str) -> str:
    """Minuscule + separateurs (tirets, underscores, slashes, %20...) remplaces par un espace."""
    return " " + _SEPARATORS_RE.sub(" ", text.lower()).strip() + " "


def _compact(text: str) -> str:
    return _SEPARATORS_RE.sub("", text.lower())


def _contains_term(haystack: str, term: str, prefixes: tuple[str, ...] = ()) -> bool:
    """Recherche de sous-chaine insensible a la casse et aux separateurs.

    ``haystack`` doit provenir de normalize_text(). Le terme doit commencer un
    mot ("mazda3" contient "mazda", "affordable" ne contient pas "ford") mais
    peut etre colle a la suite. Les termes composes ("CR-V", "3 Series")
    matchent aussi sous forme compacte ("crv", "3series"), et ``prefixes``
    autorise un terme colle a l'un d'eux ("fordf150" -> "f150").
    """
    spaced = normalize_text(term).rstrip()
    compact = _compact(term)
    if spaced in haystack or f" {compact}" in haystack:
        return True
    return any(f" {prefix}{compact}" in haystack for prefix in prefixes)


def _make_prefixes(make: str) -> tuple[str, ...]:
    """Formes compactes de la marque et de ses alias, pour les slugs 'fordf150'."""
    names = [make] + [alias for alias, canonical in BRAND_ALIASES.items() if canonical == make]
    return tuple(dict.fromkeys(_compact(name) for name in names))


def find_make(text: str | None) -> str | None:
    """Retourne la premiere marque du catalogue presente dans le texte, ou None."""
    if not text:
        return None
    haystack = normalize_text(text)
    for make in MAKES:
        if _contains_term(haystack, make):
            return make
    for alias, make in BRAND_ALIASES.items():
        if _contains_term(haystack, alias):
            return make
    return None


def find_model(text: str | None, make: str) -> str | None:
    """Retourne le premier modele connu de ``make`` present dans le texte, ou None."""
    if not text:
        return None
    haystack = normalize_text(text)
    prefixes = _make_prefixes(make)
    for model in MODELS_BY_MAKE.get(make, ()):
        if _contains_term(haystack, model, prefixes):
            return model
    return None


def default_model_for(make: str) -> str:
    """Modele de repli pour une marque : le premier de sa liste, sinon le modele par defaut."""
    models = MODELS_BY_MAKE.get(make)
    return models[0] if models else DEFAULT_MODEL


def canonical_make(make: str | None) -> str | None:
    """Forme canonique d'une marque ('mercedes-benz' -> 'Mercedes', 'honda' -> 'Honda')."""
    if not make:
        return None
    key = make.strip().lower()
    for known in MAKES:
        if known.lower() == key:
            return known
    return BRAND_ALIASES.get(key, make.strip())


def base_price_for(make: str, model: str) -> int:
    """Prix de base connu pour un couple marque/modele, sinon le prix par defaut."""
    return BASE_PRICES.get((make, model), DEFAULT_BASE_PRICE)


def reliability_score(make: str | None) -> int:
    """Note de fiabilite 1-10 de la marque (5 si inconnue)."""
    canonical = canonical_make(make)
    if canonical is None:
        return NEUTRAL_RELIABILITY
    return RELIABILITY_SCORES.get(canonical, NEUTRAL_RELIABILITY)


def is_desirable_location(location: str | None) -> bool:
    """True si la localisation contient une grande ville recherchee."""
    if not location:
        return False
    lowered = location.lower()
    return any(city in lowered for city in DESIRABLE_LOCATIONS)
