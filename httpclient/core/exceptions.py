# httpclient/core/exceptions.py
from typing import Optional


class ClientError(Exception):
    """
    Erreur structurée levée par le client HTTP.

    - url : endpoint sans query string (les credentials passés en query n'y figurent jamais)
    - status_code : code HTTP, 0 si l'échec n'est pas au niveau HTTP
    - message : description courte de l'étape en échec
    - cause : exception d'origine (aussi chaînée via __cause__)
    """

    prefix = "httpclient: "

    def __init__(self, url: str = "", status_code: int = 0, message: str = "",
                 cause: Optional[BaseException] = None):
        self._url = url
        self._status_code = status_code
        self._message = message
        self._cause = cause
        super().__init__(url, status_code, message, cause)

    @property
    def url(self) -> str:
        return self._url

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def message(self) -> str:
        return self._message

    @property
    def cause(self) -> Optional[BaseException]:
        return self._cause

    def __str__(self) -> str:
        parts = [self.prefix]
        if self._url:
            parts.append(f"url={self._url} ")
        if self._status_code > 0:
            parts.append(f"statusCode={self._status_code} ")
        if self._message:
            parts.append(self._message)
        if self._cause is not None:
            parts.append(f": {self._cause}")
        return "".join(parts)

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(url={self._url!r}, status_code={self._status_code!r}, "
                f"message={self._message!r}, cause={self._cause!r})")


class EncodeError(ClientError):
    """Le body de la requête n'a pas pu être sérialisé (status 0)."""


class ConstructError(ClientError):
    """La requête n'a pas pu être construite : méthode ou URL invalide (status 0)."""


class DispatchError(ClientError):
    """Erreur de transport : connexion refusée, timeout, ... (status 0)."""


class ResponseReadError(ClientError):
    """Un body n'a pas pu être lu (status réel, ou 0 avant l'envoi)."""


class DecodeError(ClientError):
    """Le JSON de la réponse (succès ou erreur) n'a pas pu être décodé dans la cible."""


class HTTPStatusError(ClientError):
    """Code de statut >= 400. La cause porte le body brut de la réponse."""

    @property
    def body(self) -> str:
        cause = self.cause
        return cause.text if isinstance(cause, ErrorResponseBody) else ""


class ErrorResponseBody(Exception):
    """Body brut d'une réponse en erreur, utilisé comme cause de HTTPStatusError."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(text)
