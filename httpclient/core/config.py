# httpclient/core/config.py

from dotenv import load_dotenv
import os

load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Active le dump des requêtes/réponses sur stdout.
# Lu à chaque appel : on peut le basculer à chaud (httpclient.core.config.DUMP_REQUEST = True)
DUMP_REQUEST: bool = _env_flag("HTTPCLIENT_DUMP_REQUEST")

# Timeout par défaut (secondes) des clients httpx
DEFAULT_TIMEOUT: float = float(os.getenv("HTTPCLIENT_TIMEOUT", "10.0"))

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


def get_hubspot_api_key() -> str:
    key = os.getenv("HUBSPOT_API_KEY")
    if not key:
        raise RuntimeError("HUBSPOT_API_KEY manquante. Définir la var d'environnement ou passer en mode mock.")
    return key
