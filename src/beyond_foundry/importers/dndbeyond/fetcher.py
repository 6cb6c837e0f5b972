"""
Fetch and read D&D Beyond character data.

This module handles both online fetching (through the authenticated
beyond-foundry relay) and local file reading of D&D Beyond character JSON
exports. It is the only part of the package that performs I/O.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import httpx

from ...config import Settings, load_settings
from ..base import FetchError
from .schema import DDB_CHARACTER_URL_PATTERN, RELAY_CHARACTER_PATH

logger = logging.getLogger("beyond-foundry.fetcher")


def extract_character_id(url_or_id: str | int) -> int:
    """
    Extract character ID from a D&D Beyond URL or bare numeric ID.

    Accepts:
    - Full URL: https://www.dndbeyond.com/characters/12345678
    - Builder URL: https://www.dndbeyond.com/characters/12345678/builder
    - Bare ID: "12345678" or 12345678

    Raises:
        FetchError: If the input doesn't match expected format
    """
    if isinstance(url_or_id, int) and not isinstance(url_or_id, bool):
        return url_or_id

    match = DDB_CHARACTER_URL_PATTERN.search(str(url_or_id))
    if match:
        return int(match.group(1))

    try:
        return int(str(url_or_id).strip())
    except ValueError:
        raise FetchError(
            f"Invalid D&D Beyond character URL or ID: '{url_or_id}'. "
            "Expected format: https://www.dndbeyond.com/characters/12345678 or just the numeric ID."
        ) from None


def _validate_payload(data: object, origin: str) -> dict:
    """Unwrap the ``{"data": ...}`` envelope and check the minimal shape."""
    if isinstance(data, dict) and isinstance(data.get("data"), dict):
        data = data["data"]

    if not isinstance(data, dict):
        raise FetchError(
            f"Invalid character data from {origin}: expected JSON object, got {type(data).__name__}"
        )

    if "stats" not in data or "classes" not in data:
        raise FetchError(
            f"Unrecognized character data from {origin}: missing required fields (stats, classes). "
            "Ensure this is a valid D&D Beyond character export."
        )

    return data


async def fetch_character(
    character_id: str | int,
    cobalt: str | None = None,
    settings: Settings | None = None,
) -> dict:
    """
    Fetch character JSON through the beyond-foundry relay.

    Args:
        character_id: D&D Beyond character URL or numeric ID
        cobalt: D&D Beyond session credential; defaults to the configured one
        settings: Adapter settings; loaded from the environment when omitted

    Returns:
        Raw character data as dictionary

    Raises:
        FetchError: If fetch fails, character not found, or access is denied
    """
    settings = settings or load_settings()
    cobalt = cobalt or settings.cobalt
    char_id = extract_character_id(character_id)
    url = f"{settings.proxy_url}{RELAY_CHARACTER_PATH.format(character_id=char_id)}"

    headers = {"Content-Type": "application/json"}
    if cobalt:
        headers["x-cobalt-id"] = cobalt
    else:
        logger.warning("⚠️ No cobalt session configured, only public characters can be fetched")

    logger.debug(f"🌐 Fetching character {char_id} from {settings.proxy_url}")

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(url, headers=headers, timeout=settings.timeout)

            if response.status_code == 404:
                raise FetchError(
                    f"Character not found. Check the ID or URL: {char_id}"
                )
            elif response.status_code in (401, 403):
                raise FetchError(
                    "Access denied by D&D Beyond. Check the cobalt session or make the character public."
                )

            response.raise_for_status()

            data = response.json()

    except httpx.TimeoutException:
        raise FetchError(
            f"The relay at {settings.proxy_url} is not responding. Try again later or use file import."
        ) from None
    except httpx.HTTPStatusError as e:
        raise FetchError(
            f"Relay returned HTTP {e.response.status_code}: {e.response.reason_phrase}"
        ) from None
    except httpx.RequestError as e:
        raise FetchError(
            f"Failed to connect to the relay at {settings.proxy_url}: {e}"
        ) from None
    except ValueError as e:
        raise FetchError(f"Relay returned invalid JSON: {e}") from None

    return _validate_payload(data, "the relay")


def read_character_file(file_path: str | Path) -> dict:
    """
    Read and validate a local D&D Beyond character JSON file.

    Raises:
        FetchError: If file not found, invalid JSON, or unrecognized format
    """
    path = Path(file_path)

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise FetchError(
            f"Character file not found: {file_path}"
        ) from None
    except json.JSONDecodeError as e:
        raise FetchError(
            f"Invalid JSON in character file: {e}"
        ) from None
    except OSError as e:
        raise FetchError(
            f"Failed to read character file: {e}"
        ) from None

    return _validate_payload(data, "character file")
