# httpclient/core/dump.py
"""
Dump lisible d'un échange requête/réponse sur stdout (diagnostic uniquement).

Activé via config.DUMP_REQUEST. Travaille sur des snapshots des bodies : la requête et
la réponse restent entièrement lisibles par le client après le dump.
"""
import json
from typing import Dict, List, Optional, Tuple

import httpx

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_FORM = "application/x-www-form-urlencoded"

# headers calculés par httpx (curl les déduit lui-même de l'URL et du body)
_CURL_SKIPPED_HEADERS = {"host", "content-length"}


def bash_escape(value: str) -> str:
    return "'" + value.replace("'", "'\\''") + "'"


def _grouped_headers(headers: httpx.Headers) -> List[Tuple[str, List[str]]]:
    """Regroupe les headers par nom (insensible à la casse, casse d'origine conservée), triés par nom."""
    grouped: Dict[str, Tuple[str, List[str]]] = {}
    for raw_key, raw_value in headers.raw:
        key = raw_key.decode(headers.encoding)
        value = raw_value.decode(headers.encoding)
        _, values = grouped.setdefault(key.lower(), (key, []))
        values.append(value)
    return [grouped[k] for k in sorted(grouped)]


def curl_command(request: httpx.Request, body: Optional[bytes]) -> str:
    """Rend la requête sous forme d'une commande curl équivalente."""
    cmd = ["curl"]

    if request.url.scheme == "https":
        cmd.append("-k")

    cmd += ["-X", bash_escape(request.method)]

    if body:
        cmd += ["-d", bash_escape(body.decode("utf-8", errors="replace"))]

    for name, values in _grouped_headers(request.headers):
        if name.lower() in _CURL_SKIPPED_HEADERS:
            continue
        cmd += ["-H", bash_escape(f"{name}: {' '.join(values)}")]

    cmd.append(bash_escape(str(request.url)))
    return " ".join(cmd)


def _header_lines(headers: httpx.Headers) -> str:
    return "".join(
        f"{k.decode(headers.encoding)}: {v.decode(headers.encoding)}\r\n" for k, v in headers.raw
    )


def request_head(request: httpx.Request) -> str:
    """Request-line + headers, sans le body."""
    target = request.url.raw_path.decode("ascii")
    return f"{request.method} {target} HTTP/1.1\r\n{_header_lines(request.headers)}\r\n"


def response_head(response: httpx.Response) -> str:
    """Status-line + headers, sans le body."""
    status_line = f"{response.http_version} {response.status_code} {response.reason_phrase}".rstrip()
    return f"{status_line}\r\n{_header_lines(response.headers)}\r\n"


def indent_json(data: Optional[bytes]) -> str:
    """Pretty-print JSON (indentation 2). Un body non-JSON donne une chaîne vide, jamais une erreur."""
    if not data:
        return ""
    try:
        return json.dumps(json.loads(data), indent=2, ensure_ascii=False)
    except ValueError:
        return ""


def format_dump(request: httpx.Request, request_body: Optional[bytes],
                response: httpx.Response, response_body: Optional[bytes]) -> str:
    content_type = request.headers.get("Content-Type", "")
    out = [
        "",
        "=================",
        ">>>> request <<<<",
        "=================",
        "",
        ">>>> command <<<<",
        "",
    ]

    if request.method == "GET" or CONTENT_TYPE_JSON in content_type or CONTENT_TYPE_FORM in content_type:
        out.append(curl_command(request, request_body))

    out += ["", ">>>> request dump <<<<", ""]
    out.append(request_head(request))

    if CONTENT_TYPE_JSON in content_type:
        out.append(indent_json(request_body))
        out.append("")

    out += ["**** response ****", ""]
    out.append(response_head(response))
    out.append(indent_json(response_body))

    out += [
        "=====================",
        ">>>> end request <<<<",
        "=====================",
    ]
    return "\n".join(out)


def dump_request(request: httpx.Request, request_body: Optional[bytes],
                 response: httpx.Response, response_body: Optional[bytes]) -> None:
    print(format_dump(request, request_body, response, response_body))
