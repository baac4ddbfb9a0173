# =============================================================================
# core/jokes.py  -  Random joke fetchers
# =============================================================================
#
# Each function is a thin pass-through to a free public joke API:
#
#   get_chuck_joke        https://api.chucknorris.io/jokes/random      -> "value"
#   get_chuck_categories  https://api.chucknorris.io/jokes/categories  -> [..]
#   get_dad_joke          https://icanhazdadjoke.com/                  -> "joke"
#   get_yo_mama_joke      https://www.yomama-jokes.com/api/v1/jokes/random -> "joke"
#
# The caller owns the httpx.AsyncClient so one connection pool can serve all
# four.  Any failure becomes a JokeServiceError.
# =============================================================================

from typing import Any, Optional

import httpx

from core.errors import JokeServiceError

CHUCK_NORRIS_URL = "https://api.chucknorris.io/jokes"
DAD_JOKE_URL = "https://icanhazdadjoke.com/"
YO_MAMA_URL = "https://www.yomama-jokes.com/api/v1/jokes/random"


async def _get_json(
    client: httpx.AsyncClient,
    service: str,
    url: str,
    headers: Optional[dict[str, str]] = None,
) -> Any:
    try:
        response = await client.get(url, headers=headers)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPError as e:
        raise JokeServiceError(service, f"request to {url} failed: {e}") from e
    except ValueError as e:
        raise JokeServiceError(service, f"invalid JSON from {url}") from e


def _field(data: Any, service: str, name: str) -> str:
    if not isinstance(data, dict) or not data.get(name):
        raise JokeServiceError(service, f"response has no {name!r} field")
    return data[name]


async def get_chuck_joke(client: httpx.AsyncClient) -> str:
    data = await _get_json(client, "chucknorris.io", f"{CHUCK_NORRIS_URL}/random")
    return _field(data, "chucknorris.io", "value")


async def get_chuck_categories(client: httpx.AsyncClient) -> list[str]:
    data = await _get_json(client, "chucknorris.io", f"{CHUCK_NORRIS_URL}/categories")
    if not isinstance(data, list):
        raise JokeServiceError("chucknorris.io", "expected a list of categories")
    return [str(c) for c in data]


async def get_dad_joke(client: httpx.AsyncClient) -> str:
    # icanhazdadjoke serves HTML unless JSON is asked for explicitly.
    data = await _get_json(
        client, "icanhazdadjoke", DAD_JOKE_URL, headers={"Accept": "application/json"}
    )
    return _field(data, "icanhazdadjoke", "joke")


async def get_yo_mama_joke(client: httpx.AsyncClient) -> str:
    data = await _get_json(client, "yomama-jokes", YO_MAMA_URL)
    return _field(data, "yomama-jokes", "joke")
