"""Hierarchie d'exceptions du Deal Analyzer.

Regles :
  - Ne jamais utiliser ``except Exception`` nu. Toujours attraper un type specifique.
  - FetchFailed est recuperee localement (extraction depuis l'URL), jamais exposee.
  - Chaque facteur doit lever FactorError ; le moteur la convertit en delta neutre.
"""


class DealAnalyzerError(Exception):
    """Exception de base pour toutes les erreurs du Deal Analyzer."""


class NotACarListing(DealAnalyzerError):
    """L'URL ne ressemble pas a une annonce de vehicule."""


class FetchFailed(DealAnalyzerError):
    """La page de l'annonce n'a pas pu etre recuperee (reseau, DNS, HTTP)."""


class ExtractionFailed(DealAnalyzerError):
    """La page a ete recuperee mais aucun champ exploitable n'a ete trouve."""


class InvalidMarketData(DealAnalyzerError):
    """Les donnees marche ne permettent pas de calculer un score (denominateur nul)."""


class FactorError(DealAnalyzerError):
    """Une erreur est survenue dans un facteur de scoring."""


class ExternalAPIError(DealAnalyzerError):
    """Un appel API externe a echoue (prix marche, LLM, rendu HTML)."""


class ValidationError(DealAnalyzerError):
    """Les donnees d'entree n'ont pas passe la validation."""
