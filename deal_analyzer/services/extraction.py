"""Service d'extraction des donnees structurees d'une annonce de vehicule.

Deux chemins produisent un CarListing :
  - extract_from_html : parse la page avec une table unique de selecteurs CSS
    par champ (le premier candidat non vide gagne) ;
  - extract_from_url : repli quand la page est inaccessible, deduit marque,
    modele et annee du texte de l'URL et synthetise prix/kilometrage.
"""

import logging
import math
import random
import re
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote, urlsplit

from bs4 import BeautifulSoup
from pydantic import ValidationError as PydanticValidationError

from deal_analyzer.errors import ExtractionFailed, FetchFailed, NotACarListing
from deal_analyzer.schemas.listing import (
    MIN_YEAR,
    SOURCE_AI,
    SOURCE_PAGE,
    SOURCE_URL,
    CarListing,
)
from deal_analyzer.services.vehicle_catalog import (
    DEFAULT_BASE_MILEAGE,
    DEFAULT_MAKE,
    DEFAULT_MODEL,
    base_price_for,
    canonical_make,
    default_model_for,
    find_make,
    find_model,
)

logger = logging.getLogger(__name__)

CAR_LISTING_DOMAINS: tuple[str, ...] = (
    "cars.com",
    "autotrader.com",
    "cargurus.com",
    "carmax.com",
    "edmunds.com",
    "carsdirect.com",
    "truecar.com",
    "carvana.com",
    "vroom.com",
    "shift.com",
    "driveway.com",
    "carfax.com",
    "kbb.com",
    "nada.com",
    "autolist.com",
    "carsforsale.com",
)

CAR_KEYWORDS: tuple[str, ...] = (
    "car",
    "vehicle",
    "auto",
    "truck",
    "suv",
    "sedan",
    "hatchback",
    "wagon",
)

# Candidats ordonnes par champ. Les selecteurs specifiques aux grands sites
# passent avant les motifs generiques.
FIELD_SELECTORS: dict[str, tuple[str, ...]] = {
    "title": (
        'h1[data-testid="vehicle-title"]',
        'h1[data-cmp="vehicle-title"]',
        ".vehicle-title",
        ".listing-title",
        ".car-title",
        "h1",
        ".product-title",
        ".item-title",
        '[class*="title"]',
        '[class*="heading"]',
    ),
    "make": (
        '[data-testid="vehicle-make"]',
        ".vehicle-make",
        ".listing-make",
        '[itemprop="brand"]',
    ),
    "model": (
        '[data-testid="vehicle-model"]',
        ".vehicle-model",
        ".listing-model",
        '[itemprop="model"]',
    ),
    "price": (
        '[data-testid="price"]',
        '[data-cmp="price"]',
        ".price",
        ".vehicle-price",
        ".listing-price",
        ".car-price",
        '[data-testid*="price"]',
        '[class*="price"]',
        '[class*="Price"]',
        ".amount",
        ".cost",
    ),
    "mileage": (
        '[data-testid="mileage"]',
        '[data-cmp="mileage"]',
        ".mileage",
        ".vehicle-mileage",
        ".car-mileage",
        '[data-testid*="mileage"]',
        '[class*="mileage"]',
        '[class*="Mileage"]',
    ),
    "location": (
        ".dealer-location",
        ".location",
        ".seller-location",
        '[class*="location"]',
        '[class*="Location"]',
        ".address",
        ".city",
    ),
    "description": (
        ".vehicle-description",
        ".description",
        ".car-description",
        '[class*="description"]',
        ".details",
        ".features",
    ),
    "images": (
        'img[data-testid="vehicle-image"]',
        'img[data-cmp="vehicle-image"]',
    ),
}

MIN_TITLE_LENGTH = 5
MIN_LOCATION_LENGTH = 2
MIN_DESCRIPTION_LENGTH = 20
MAX_DESCRIPTION_LENGTH = 500
MAX_IMAGES = 5

PRICE_RANGE = (1000, 500000)
MILEAGE_RANGE = (0, 500000)

PRICE_JITTER = 0.20
MILEAGE_JITTER = 0.15

UNKNOWN_LOCATION = "Unknown Location"
_PLACEHOLDER_IMAGE = "https://via.placeholder.com/400x300/0ea5e9/ffffff?text={}"

_YEAR_RE = re.compile(r"(?<!\d)(?:19|20)\d{2}(?!\d)")
_IMAGE_HINTS = ("car", "vehicle", "auto")


def _current_year() -> int:
    return datetime.now(timezone.utc).year


def is_car_listing_url(url: str) -> bool:
    """True si l'URL ressemble a une annonce de vehicule.

    Domaine de place de marche connue d'abord, puis mots-cles vehicule
    dans le texte de l'URL.
    """
    if not url:
        return False
    host = (urlsplit(url).hostname or "").lower()
    if any(host == d or host.endswith("." + d) for d in CAR_LISTING_DOMAINS):
        return True
    lowered = url.lower()
    return any(keyword in lowered for keyword in CAR_KEYWORDS)


def ensure_car_listing_url(url: str) -> None:
    """Leve NotACarListing si l'URL ne ressemble pas a une annonce."""
    if not is_car_listing_url(url):
        logger.info("NOT_A_CAR_LISTING: %s", url)
        raise NotACarListing(
            "This URL does not appear to be a car listing. "
            "Please provide a valid car listing URL."
        )


def parse_int(text: str | None) -> int | None:
    """Garde chiffres et virgules, retire les virgules, parse un entier."""
    if not text:
        return None
    digits = re.sub(r"[^\d,]", "", str(text)).replace(",", "")
    if not digits:
        return None
    try:
        return int(digits)
    except ValueError:
        return None


def _coerce_int(value: Any) -> int | None:
    """Entier depuis un nombre JSON ou un texte ("$22,500"). NaN/Infinity -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return parse_int(str(value))


def _in_range(value: int | None, bounds: tuple[int, int]) -> int | None:
    if value is None:
        return None
    low, high = bounds
    return value if low <= value <= high else None


def parse_price(text: str | None) -> int | None:
    """Prix entier dans [1 000, 500 000], sinon None."""
    return _in_range(parse_int(text), PRICE_RANGE)


def parse_mileage(text: str | None) -> int | None:
    """Kilometrage entier dans [0, 500 000], sinon None."""
    return _in_range(parse_int(text), MILEAGE_RANGE)


def parse_year(text: str | None, current_year: int | None = None) -> int | None:
    """Premiere annee 19xx/20xx plausible (<= annee courante + 1) trouvee dans le texte."""
    if not text:
        return None
    max_year = (current_year or _current_year()) + 1
    for match in _YEAR_RE.finditer(text):
        year = int(match.group(0))
        if MIN_YEAR <= year <= max_year:
            return year
    return None


def resolve_make_model(text: str | None) -> tuple[str, str]:
    """Marque et modele depuis un texte libre (titre ou URL).

    Sans marque reconnue, retourne le couple par defaut Toyota/Camry ;
    avec une marque mais sans modele connu, le premier modele de la marque.
    """
    make = find_make(text)
    if make is None:
        return DEFAULT_MAKE, DEFAULT_MODEL
    return make, find_model(text, make) or default_model_for(make)


def placeholder_image(make: str, model: str) -> str:
    return _PLACEHOLDER_IMAGE.format(quote(f"{make} {model}"))


def _texts(soup: BeautifulSoup, field: str):
    """Itere les textes non vides des elements correspondant aux selecteurs du champ."""
    for selector in FIELD_SELECTORS[field]:
        for element in soup.select(selector):
            text = element.get_text(" ", strip=True)
            if text:
                yield text


def _first_text(soup: BeautifulSoup, field: str, min_length: int = 1) -> str | None:
    for text in _texts(soup, field):
        if len(text) >= min_length:
            return text
    return None


def _first_parsed(soup: BeautifulSoup, field: str, parser) -> int | None:
    for text in _texts(soup, field):
        value = parser(text)
        if value is not None:
            return value
    return None


def _extract_images(soup: BeautifulSoup) -> list[str]:
    images: list[str] = []
    for selector in FIELD_SELECTORS["images"]:
        for img in soup.select(selector):
            src = img.get("src")
            if src and src not in images:
                images.append(src)

    if not images:
        # Repli : images dont la source ou le texte alternatif evoque un vehicule
        for img in soup.find_all("img"):
            src = img.get("src") or ""
            alt = (img.get("alt") or "").lower()
            if src and src not in images and any(h in src.lower() or h in alt for h in _IMAGE_HINTS):
                images.append(src)
    return images[:MAX_IMAGES]


def extract_from_html(html: str, url: str, current_year: int | None = None) -> CarListing:
    """Extrait un CarListing depuis le HTML d'une page d'annonce.

    Args:
        html: Le HTML brut (ou rendu) de la page.
        url: L'URL de l'annonce.
        current_year: Annee de reference (par defaut l'annee courante UTC).

    Returns:
        Un CarListing dont ``source`` vaut "Page Extraction".

    Raises:
        ExtractionFailed: Si ni titre ni prix ne sont trouves dans la page.
    """
    current_year = current_year or _current_year()
    soup = BeautifulSoup(html or "", "lxml")

    title = _first_text(soup, "title", min_length=MIN_TITLE_LENGTH + 1)
    price = _first_parsed(soup, "price", parse_price)

    if not title and price is None:
        raise ExtractionFailed(
            "Could not extract car information from this page. "
            "The listing may be incomplete or in an unsupported format."
        )

    # Les champs dedies de la page priment sur le titre
    make_text = _first_text(soup, "make")
    make = find_make(make_text) or find_make(title)
    if make is None:
        make, model = DEFAULT_MAKE, DEFAULT_MODEL
    else:
        model_text = _first_text(soup, "model")
        model = (
            find_model(model_text, make)
            or find_model(title, make)
            or default_model_for(make)
        )

    year = parse_year(title, current_year) or current_year

    if price is None:
        price = base_price_for(make, model)
        logger.warning("No price found on %s, using base price %d", url, price)

    mileage = _first_parsed(soup, "mileage", parse_mileage)
    if mileage is None:
        mileage = DEFAULT_BASE_MILEAGE
        logger.warning("No mileage found on %s, using default %d", url, mileage)

    location = _first_text(soup, "location", min_length=MIN_LOCATION_LENGTH + 1)
    description = _first_text(soup, "description", min_length=MIN_DESCRIPTION_LENGTH + 1)
    images = _extract_images(soup)

    listing = CarListing(
        url=url,
        title=title or f"{year} {make} {model}",
        price=price,
        year=year,
        make=make,
        model=model,
        mileage=mileage,
        location=location or UNKNOWN_LOCATION,
        description=(description or f"Well-maintained {year} {make} {model}")[
            :MAX_DESCRIPTION_LENGTH
        ],
        images=images or [placeholder_image(make, model)],
        source=SOURCE_PAGE,
    )
    logger.info(
        "Extracted listing: %s %s %d - $%d, %d mi",
        listing.make,
        listing.model,
        listing.year,
        listing.price,
        listing.mileage,
    )
    return listing


def listing_from_fields(
    fields: dict[str, Any], url: str, source: str = SOURCE_AI
) -> CarListing | None:
    """Construit un CarListing depuis un dict de champs (ex. sortie LLM).

    Retourne None si les champs ne satisfont pas les invariants d'une annonce.
    """
    price = _in_range(_coerce_int(fields.get("price")), PRICE_RANGE)
    year = parse_year(str(_coerce_int(fields.get("year")) or ""))
    make = canonical_make(str(fields.get("make") or "")) or None
    if price is None or year is None or not make:
        logger.info("Discarding incomplete fields for %s: %s", url, fields)
        return None

    model = str(fields.get("model") or "").strip() or default_model_for(make)
    mileage = _in_range(_coerce_int(fields.get("mileage")), MILEAGE_RANGE)
    try:
        return CarListing(
            url=url,
            title=str(fields.get("title") or f"{year} {make} {model}"),
            price=price,
            year=year,
            make=make,
            model=model,
            mileage=mileage if mileage is not None else DEFAULT_BASE_MILEAGE,
            location=str(fields.get("location") or UNKNOWN_LOCATION),
            description=str(fields.get("description") or "")[:MAX_DESCRIPTION_LENGTH],
            images=[placeholder_image(make, model)],
            source=source,
        )
    except PydanticValidationError as exc:
        logger.warning("Fields for %s failed validation: %s", url, exc)
        return None


def extract_from_url(
    url: str, rng: random.Random | None = None, current_year: int | None = None
) -> CarListing:
    """Deduit une annonce plausible du seul texte de l'URL. Ne leve jamais.

    Prix = prix de base (marque+modele) x (1 +/- 20 %), kilometrage =
    45 000 x (1 +/- 15 %), tires du generateur ``rng`` (injecte pour les tests).
    """
    rng = rng or random.Random()
    current_year = current_year or _current_year()

    if find_make(url) is None:
        logger.warning("Could not infer a make from URL %s, using defaults", url)
    make, model = resolve_make_model(url)
    year = parse_year(url, current_year) or current_year

    base_price = base_price_for(make, model)
    price = max(1, round(base_price * (1 + rng.uniform(-PRICE_JITTER, PRICE_JITTER))))
    mileage = max(0, round(DEFAULT_BASE_MILEAGE * (1 + rng.uniform(-MILEAGE_JITTER, MILEAGE_JITTER))))

    listing = CarListing(
        url=url,
        title=f"{year} {make} {model}",
        price=price,
        year=year,
        make=make,
        model=model,
        mileage=mileage,
        location=UNKNOWN_LOCATION,
        description=f"Well-maintained {year} {make} {model} with {mileage:,} miles.",
        images=[placeholder_image(make, model)],
        source=SOURCE_URL,
    )
    logger.info("Extracted from URL pattern: %s %s %d - $%d", make, model, year, price)
    return listing


def validate_listing(listing: CarListing, current_year: int | None = None) -> list[str]:
    """Avertissements non bloquants sur la plausibilite d'une annonce."""
    current_year = current_year or _current_year()
    warnings: list[str] = []
    if len(listing.title.strip()) < 3:
        warnings.append("Title is missing or too short")
    if not PRICE_RANGE[0] <= listing.price <= PRICE_RANGE[1]:
        warnings.append("Price seems unrealistic")
    if not MIN_YEAR <= listing.year <= current_year + 1:
        warnings.append("Year seems invalid")
    if not listing.make:
        warnings.append("Make could not be determined")
    if not listing.model:
        warnings.append("Model could not be determined")
    if not MILEAGE_RANGE[0] <= listing.mileage <= MILEAGE_RANGE[1]:
        warnings.append("Mileage seems unrealistic")
    return warnings


class ListingExtractor:
    """Contrat unique ``extract(url) -> CarListing``.

    Delegue eventuellement au LLM ; l'appelant ne sait pas quel chemin a servi
    sauf via ``CarListing.source``.
    """

    def __init__(
        self,
        fetcher,
        llm_client=None,
        rng: random.Random | None = None,
        require_listing_url: bool = True,
    ):
        self.fetcher = fetcher
        self.llm_client = llm_client
        self.rng = rng or random.Random()
        self.require_listing_url = require_listing_url

    def extract(self, url: str) -> CarListing:
        """Valide l'URL, recupere la page et en extrait l'annonce.

        Raises:
            NotACarListing: URL rejetee par le controle de vraisemblance.
            FetchFailed: page injoignable (l'appelant choisit le repli URL).
            ExtractionFailed: page recuperee mais sans champ exploitable.
        """
        if self.require_listing_url:
            ensure_car_listing_url(url)

        html = self.fetcher.fetch_html(url)

        if self.llm_client is not None:
            page_text = BeautifulSoup(html, "lxml").get_text(" ", strip=True)
            fields = self.llm_client.extract_listing_fields(page_text)
            if fields:
                listing = listing_from_fields(fields, url)
                if listing is not None:
                    return listing

        listing = extract_from_html(html, url)
        warnings = validate_listing(listing)
        if warnings:
            logger.warning("Listing validation warnings for %s: %s", url, warnings)
        return listing

    def extract_from_url(self, url: str) -> CarListing:
        return extract_from_url(url, rng=self.rng)

    def extract_or_infer(self, url: str) -> CarListing:
        """extract() avec repli sur l'inference depuis l'URL si la page est injoignable."""
        try:
            return self.extract(url)
        except FetchFailed as exc:
            logger.info("Fetch failed (%s), falling back to URL pattern extraction", exc)
            return self.extract_from_url(url)
