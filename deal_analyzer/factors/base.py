"""Classe abstraite BaseFactor, contexte de scoring et dataclass FactorResult.

Chaque facteur DOIT heriter de BaseFactor et implementer run().
Chaque facteur DOIT retourner un FactorResult -- lever FactorError sinon.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from deal_analyzer.schemas.listing import CarListing
from deal_analyzer.schemas.market import MarketComparison


@dataclass(frozen=True)
class ScoringContext:
    """Valeurs derivees une seule fois de (annonce, marche), partagees par les facteurs.

    Attributs :
        percentage_difference: (prix - prix moyen) / prix moyen x 100.
        average_mileage: Kilometrage moyen des annonces similaires (> 0).
        mileage_difference: (km - km moyen) / km moyen x 100.
        age: Annee de reference - annee du modele.
    """

    listing: CarListing
    market: MarketComparison
    current_year: int
    percentage_difference: float
    average_mileage: float
    mileage_difference: float

    @property
    def age(self) -> int:
        return self.current_year - self.listing.year


@dataclass
class FactorResult:
    """Type de retour uniforme pour tous les facteurs.

    Attributs :
        factor_id: Identifiant du facteur, ex. "price", "mileage".
        delta: Points ajoutes (ou retires) au score de base.
        reasoning: Phrases explicatives, chacune citant la valeur calculee.
        pros: Points forts courts.
        cons: Points faibles courts.
        details: Donnees supplementaires optionnelles.
    """

    factor_id: str
    delta: int
    reasoning: list[str] = field(default_factory=list)
    pros: list[str] = field(default_factory=list)
    cons: list[str] = field(default_factory=list)
    details: dict[str, Any] | None = None


class BaseFactor(ABC):
    """Classe de base abstraite pour tous les facteurs de scoring.

    Les sous-classes doivent implementer :
        - factor_id: attribut de classe identifiant le facteur
        - run(ctx): calcule le delta et les textes associes
    """

    factor_id: str = ""

    @abstractmethod
    def run(self, ctx: ScoringContext) -> FactorResult:
        """Evalue le facteur sur le contexte de scoring."""

    def neutral(self, details: dict[str, Any] | None = None) -> FactorResult:
        """Resultat sans effet sur le score."""
        return FactorResult(factor_id=self.factor_id, delta=0, details=details)
