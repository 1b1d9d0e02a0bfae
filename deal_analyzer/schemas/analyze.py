"""Schemas Pydantic pour le point d'acces /api/analyze."""

from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
    """Corps de la requete pour POST /api/analyze."""

    url: str = Field(..., min_length=1, description="URL de l'annonce a analyser")
