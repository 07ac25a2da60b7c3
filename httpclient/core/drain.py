# httpclient/core/drain.py
import io
from typing import Any, Tuple


class NoBody(io.RawIOBase):
    """Stream vide servant de sentinelle « pas de body ». Jamais réellement fermé."""

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        return 0

    def close(self) -> None:
        # la sentinelle est partagée : elle doit rester lisible
        pass

    def __repr__(self) -> str:
        return "NO_BODY"


NO_BODY = NoBody()


class DrainError(Exception):
    """Échec de lecture/fermeture du stream d'origine. `body` est la référence d'origine, inchangée."""

    def __init__(self, body: Any, cause: BaseException):
        self.body = body
        self.cause = cause
        super().__init__(f"drain body failed: {cause}")


def drain_body(body: Any) -> Tuple[io.RawIOBase, io.RawIOBase]:
    """
    Lit entièrement un stream à usage unique et retourne deux copies indépendantes.

    La première remplace l'original (qui est fermé), la seconde sert à l'inspection (dump).
    Les deux sont adossées au même snapshot d'octets : lire l'une n'affecte pas l'autre.
    """
    if body is None or body is NO_BODY:
        return NO_BODY, NO_BODY

    try:
        if hasattr(body, "read"):
            data = body.read()
        else:
            data = b"".join(body)
    except Exception as e:
        raise DrainError(body, e) from e

    if isinstance(data, str):
        data = data.encode("utf-8")

    close = getattr(body, "close", None)
    if close is not None:
        try:
            close()
        except Exception as e:
            raise DrainError(body, e) from e

    return io.BytesIO(data), io.BytesIO(data)
