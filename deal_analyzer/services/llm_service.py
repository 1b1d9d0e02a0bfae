"""Service LLM -- extraction assistee des champs d'annonce via l'API Ollama locale.

Capacite optionnelle : si Ollama est injoignable ou repond mal, l'extracteur
retombe sur l'extraction par selecteurs sans que l'appelant le sache.
"""

import json
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

_TIMEOUT = httpx.Timeout(connect=5.0, read=30.0, write=5.0, pool=5.0)

MAX_PAGE_TEXT = 4000

EXTRACTION_PROMPT = (
    "Extract car information from the page content. Return a JSON object with: "
    "title, price (number), year (number), make, model, mileage (number), location, "
    "description. If any field is not found, use null."
)

REQUIRED_FIELDS = ("title", "price", "year", "make")


class OllamaClient:
    """Client minimal pour POST {base_url}/api/generate."""

    def __init__(self, base_url: str = "http://localhost:11434", model: str = "mistral"):
        self.base_url = base_url.rstrip("/")
        self.model = model

    def generate(self, prompt: str, json_mode: bool = False) -> str:
        """Envoie le prompt au LLM et retourne le texte genere.

        Raises ConnectionError si Ollama est injoignable ou repond en erreur.
        """
        body: dict[str, Any] = {"model": self.model, "prompt": prompt, "stream": False}
        if json_mode:
            body["format"] = "json"

        try:
            resp = httpx.post(f"{self.base_url}/api/generate", json=body, timeout=_TIMEOUT)
        except httpx.HTTPError as exc:
            raise ConnectionError(f"Ollama injoignable: {exc}") from exc

        if resp.status_code != 200:
            raise ConnectionError(f"Ollama erreur {resp.status_code}: {resp.text}")

        try:
            return resp.json().get("response", "")
        except ValueError as exc:
            raise ConnectionError(f"Ollama reponse invalide: {exc}") from exc

    def extract_listing_fields(self, page_text: str) -> dict[str, Any] | None:
        """Demande au LLM les champs de l'annonce presents dans le texte de la page.

        Retourne le dict si title, price, year et make sont renseignes, sinon None.
        """
        prompt = f"{EXTRACTION_PROMPT}\n\n--- PAGE ---\n\n{page_text[:MAX_PAGE_TEXT]}"
        try:
            raw = self.generate(prompt, json_mode=True)
        except ConnectionError as exc:
            logger.info("AI extraction unavailable: %s", exc)
            return None

        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("AI extraction returned non-JSON output (%d chars)", len(raw))
            return None

        if not isinstance(data, dict) or not all(data.get(f) for f in REQUIRED_FIELDS):
            logger.info("AI extraction incomplete: %s", data)
            return None

        logger.info("AI extraction result: %s %s %s", data.get("make"), data.get("model"), data.get("year"))
        return data
