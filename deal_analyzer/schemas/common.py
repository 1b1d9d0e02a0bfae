"""Schemas communs : base camelCase et enveloppe de reponse API."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base des modeles domaine.

    Attributs Python en snake_case, JSON en camelCase (format attendu par le front-end).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict[str, Any]:
        """Serialise en dict JSON-compatible avec les alias camelCase."""
        return self.model_dump(mode="json", by_alias=True)


class APIResponse(BaseModel):
    """Enveloppe de reponse API uniforme.

    Succes : {"success": true, "data": {...}}
    Erreur : {"success": false, "error": "...", "details": "..."}
    """

    success: bool
    error: str | None = None
    details: str | None = None
    data: Any = None
