"""Extensions Flask -- instanciees ici, initialisees dans create_app()."""

from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

cors = CORS()

# Stockage memoire : limites par processus, remises a zero au redemarrage.
# Les en-tetes X-RateLimit-* indiquent au front-end le quota restant.
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    headers_enabled=True,
)
