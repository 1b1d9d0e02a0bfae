"""Recuperation du HTML d'une page d'annonce.

Requete directe httpx avec une signature de navigateur realiste, precedee
optionnellement d'un rendu JavaScript via l'API Zyte quand une cle est configuree.
Aucune relance : un echec leve FetchFailed et l'appelant decide du repli.
"""

import logging

import httpx

from deal_analyzer.errors import FetchFailed

logger = logging.getLogger(__name__)

MAX_TIMEOUT_SECONDS = 30.0
ZYTE_API_URL = "https://api.zyte.com/v1/extract"

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}


class PageFetcher:
    """Recupere le HTML (eventuellement rendu) d'une URL d'annonce."""

    def __init__(
        self,
        timeout: float = 15.0,
        max_redirects: int = 5,
        zyte_api_key: str | None = None,
    ):
        self.timeout = min(timeout, MAX_TIMEOUT_SECONDS)
        self.max_redirects = min(max_redirects, 5)
        self.zyte_api_key = zyte_api_key or None

    def fetch_html(self, url: str) -> str:
        """Retourne le HTML de la page.

        Raises:
            FetchFailed: erreur reseau/DNS, timeout, trop de redirections,
                ou statut HTTP hors 2xx/3xx.
        """
        if self.zyte_api_key:
            html = self._fetch_rendered(url)
            if html:
                return html
        return self._fetch_direct(url)

    def _fetch_direct(self, url: str) -> str:
        try:
            with httpx.Client(
                headers=BROWSER_HEADERS,
                follow_redirects=True,
                max_redirects=self.max_redirects,
                timeout=self.timeout,
            ) as client:
                resp = client.get(url)
        except httpx.TooManyRedirects as exc:
            logger.warning("Too many redirects for %s", url)
            raise FetchFailed(f"Too many redirects: {url}") from exc
        except httpx.TimeoutException as exc:
            logger.warning("Timeout after %.0fs fetching %s", self.timeout, url)
            raise FetchFailed(f"Timeout fetching {url}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Network error fetching %s: %s", url, exc)
            raise FetchFailed(f"Could not reach {url}: {exc}") from exc

        if not 200 <= resp.status_code < 400:
            logger.warning("Fetch %s returned HTTP %d", url, resp.status_code)
            raise FetchFailed(f"HTTP {resp.status_code} for {url}")

        logger.info("Fetched %s (%d bytes)", url, len(resp.text))
        return resp.text

    def _fetch_rendered(self, url: str) -> str | None:
        """Rendu navigateur via Zyte. Retourne None en cas d'echec (repli direct)."""
        try:
            resp = httpx.post(
                ZYTE_API_URL,
                json={"url": url, "browserHtml": True},
                auth=(self.zyte_api_key, ""),
                timeout=MAX_TIMEOUT_SECONDS,
            )
        except httpx.HTTPError as exc:
            logger.warning("Zyte rendering failed for %s: %s", url, exc)
            return None

        if resp.status_code != 200:
            logger.warning("Zyte returned %d for %s", resp.status_code, url)
            return None

        try:
            html = resp.json().get("browserHtml")
        except ValueError:
            logger.warning("Zyte returned invalid JSON for %s", url)
            return None
        if not html:
            logger.info("Zyte returned no browserHtml for %s", url)
            return None
        logger.info("Rendered %s via Zyte (%d bytes)", url, len(html))
        return html
