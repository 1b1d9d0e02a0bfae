"""Schema Pydantic d'une annonce de vehicule normalisee."""

from datetime import datetime, timezone

from pydantic import Field, field_validator

from deal_analyzer.schemas.common import CamelModel

MIN_YEAR = 1900

SOURCE_PAGE = "Page Extraction"
SOURCE_AI = "AI Extraction"
SOURCE_URL = "URL Pattern Extraction"


class CarListing(CamelModel):
    """Annonce normalisee produite par l'extracteur.

    Les champs peuvent etre des valeurs de repli quand la page source
    est incomplete ; ``source`` indique la provenance des donnees.
    """

    url: str
    title: str
    price: int = Field(..., gt=0)
    year: int
    make: str
    model: str
    mileage: int = Field(..., ge=0)
    location: str = "Unknown Location"
    description: str = ""
    images: list[str] = Field(default_factory=list)
    source: str | None = None

    @field_validator("year")
    @classmethod
    def _year_in_range(cls, value: int) -> int:
        max_year = datetime.now(timezone.utc).year + 1
        if not MIN_YEAR <= value <= max_year:
            raise ValueError(f"year must be within [{MIN_YEAR}, {max_year}]")
        return value

    @property
    def cache_key(self) -> str:
        """Cle composite utilisee par le cache d'analyses."""
        return f"{self.url}-{self.price}-{self.mileage}"
