"""Orchestration d'une analyse : extraction -> cache -> marche -> scoring."""

import logging
import random
from collections.abc import Callable
from typing import Any

from deal_analyzer.schemas.analysis import DealAnalysis
from deal_analyzer.services.cache import TTLCache
from deal_analyzer.services.extraction import ListingExtractor
from deal_analyzer.services.fetcher import PageFetcher
from deal_analyzer.services.llm_service import OllamaClient
from deal_analyzer.services.market_service import MarketDataProvider
from deal_analyzer.services.scoring import score_deal

logger = logging.getLogger(__name__)

ANALYSIS_CACHE_TTL_SECONDS = 60 * 60


class DealAnalyzer:
    """Point d'entree unique du pipeline d'analyse.

    Toutes les dependances sont injectees : les tests fournissent un extracteur
    et un fournisseur marche deterministes (rng seede, fetcher factice).

    Usage:
        analyzer = build_analyzer(app.config)
        analysis = analyzer.analyze("https://www.cars.com/vehicledetail/123/")
    """

    def __init__(
        self,
        extractor: ListingExtractor,
        market_provider: MarketDataProvider,
        cache: TTLCache | None = None,
        current_year: Callable[[], int | None] | None = None,
    ):
        self.extractor = extractor
        self.market_provider = market_provider
        self.cache = cache or TTLCache(ANALYSIS_CACHE_TTL_SECONDS, name="analysis")
        self._current_year = current_year or (lambda: None)

    def analyze(self, url: str) -> DealAnalysis:
        """Analyse complete d'une URL d'annonce.

        Raises:
            NotACarListing: URL rejetee.
            ExtractionFailed: page recuperee mais inexploitable.
            InvalidMarketData: reference marche inutilisable.
        """
        logger.info("Analyzing car deal: %s", url)
        listing = self.extractor.extract_or_infer(url)

        cache_key = listing.cache_key
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info("Returning cached analysis for %s", cache_key)
            return cached

        def compute() -> DealAnalysis:
            market = self.market_provider.get_market_comparison(listing.make, listing.model)
            analysis = score_deal(listing, market, current_year=self._current_year())
            logger.info(
                "Analysis complete for %s: %d/100 (%s, source=%s)",
                url,
                analysis.deal_score,
                analysis.recommendation,
                listing.source,
            )
            return analysis

        return self.cache.get_or_compute(cache_key, compute)

    def market_data(self, make: str, model: str):
        return self.market_provider.get_market_comparison(make, model)

    def clear_cache(self) -> None:
        """Vide le cache des analyses et celui des donnees marche."""
        self.cache.clear()
        self.market_provider.clear_cache()

    def cache_stats(self) -> dict[str, Any]:
        return self.cache.stats()


def build_analyzer(config) -> DealAnalyzer:
    """Construit un DealAnalyzer a partir de la configuration Flask (mapping)."""
    seed = config.get("RANDOM_SEED")
    rng = random.Random(seed) if seed is not None else random.Random()
    max_size = config.get("CACHE_MAX_SIZE", 1000)

    llm_client = None
    if config.get("LLM_ENABLED"):
        llm_client = OllamaClient(
            base_url=config.get("OLLAMA_URL", "http://localhost:11434"),
            model=config.get("OLLAMA_MODEL", "mistral"),
        )
        logger.info("AI-assisted extraction enabled (model=%s)", llm_client.model)

    extractor = ListingExtractor(
        fetcher=PageFetcher(
            timeout=config.get("FETCH_TIMEOUT", 15.0),
            max_redirects=config.get("FETCH_MAX_REDIRECTS", 5),
            zyte_api_key=config.get("ZYTE_API_KEY"),
        ),
        llm_client=llm_client,
        rng=rng,
        require_listing_url=config.get("REQUIRE_LISTING_URL", True),
    )
    market_provider = MarketDataProvider(
        cache=TTLCache(config.get("MARKET_CACHE_TTL", 30 * 60), max_size=max_size, name="market"),
        rng=rng,
        api_url=config.get("MARKET_API_URL"),
        api_key=config.get("MARKET_API_KEY"),
        api_timeout=config.get("MARKET_API_TIMEOUT", 5.0),
    )
    return DealAnalyzer(
        extractor=extractor,
        market_provider=market_provider,
        cache=TTLCache(
            config.get("ANALYSIS_CACHE_TTL", ANALYSIS_CACHE_TTL_SECONDS),
            max_size=max_size,
            name="analysis",
        ),
    )
