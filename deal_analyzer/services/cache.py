"""Cache memoire a duree de vie bornee (TTL) et taille bornee.

Utilise pour les analyses (60 min) et les donnees marche (30 min).
Aucune persistance : le contenu disparait au redemarrage du processus.
"""

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

logger = logging.getLogger(__name__)


class TTLCache:
    """Dictionnaire cle -> (valeur, horodatage d'ecriture).

    Une entree est valide tant que ``now - written_at < ttl``. La verification
    se fait a la lecture ; l'ecriture evince les entrees les plus anciennes
    au-dela de ``max_size``. Toutes les operations sont protegees par un verrou
    (Flask sert les requetes sur plusieurs threads).

    Usage:
        cache = TTLCache(ttl_seconds=3600, max_size=1000, name="analysis")
        cache.set("key", value)
        cache.get("key")
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_size: int = 1000,
        clock: Callable[[], float] = time.monotonic,
        name: str = "cache",
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self.name = name
        self._clock = clock
        self._entries: OrderedDict[str, tuple[Any, float]] = OrderedDict()
        self._lock = threading.Lock()
        # cle -> [verrou, nombre d'appelants en attente ou en cours]
        self._key_locks: dict[str, list] = {}

    def get(self, key: str) -> Any | None:
        """Retourne la valeur si presente et non expiree, sinon None."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, written_at = entry
            if self._clock() - written_at < self.ttl_seconds:
                logger.debug("Cache %s hit: %s", self.name, key)
                return value
            del self._entries[key]
            logger.debug("Cache %s expired: %s", self.name, key)
            return None

    def set(self, key: str, value: Any) -> None:
        """Ecrit (ou remplace) une entree et applique la borne de taille."""
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = (value, self._clock())
            while len(self._entries) > self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Cache %s evicted: %s", self.name, evicted)

    def get_or_compute(self, key: str, compute: Callable[[], Any]) -> Any:
        """Retourne la valeur en cache, sinon la calcule et l'ecrit.

        Un verrou par cle couvre la sequence lecture -> calcul -> ecriture :
        deux appels concurrents sur une meme cle absente ne calculent qu'une
        fois et recoivent le meme objet. Les cles differentes restent paralleles.
        """
        value = self.get(key)
        if value is not None:
            return value
        with self._key_lock(key):
            value = self.get(key)
            if value is not None:
                return value
            value = compute()
            self.set(key, value)
            return value

    @contextmanager
    def _key_lock(self, key: str) -> Iterator[None]:
        with self._lock:
            entry = self._key_locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._lock:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._key_locks[key]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
        logger.info("Cache %s cleared", self.name)

    def stats(self) -> dict[str, Any]:
        """Taille et cles actuelles (entrees expirees non encore purgees incluses)."""
        with self._lock:
            return {"size": len(self._entries), "keys": list(self._entries.keys())}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
