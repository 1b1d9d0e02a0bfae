"""Blueprints HTTP -- API d'analyse (/api) et sonde de sante (racine)."""

from flask import Blueprint

api_bp = Blueprint("api", __name__)
health_bp = Blueprint("health", __name__)

from deal_analyzer.api import errors, routes  # noqa: E402, F401
