"""Notion page translator backed by DeepL.

Translates a Notion page in place:
- the page title is translated and written back first
- the block tree is then walked depth-first; every block is translated and
  written back after all of its children

Tokens: NOTION_API_TOKEN and DEEPL_API_TOKEN, read from the environment or a
.env file in the working directory. --token-file overrides the Notion token.
"""

import asyncio
import copy
import json
import logging
import os
import re
import sys
import webbrowser
from enum import Enum, auto
from pathlib import Path
from typing import Any, Optional

import httpx
from dotenv import load_dotenv

logger = logging.getLogger("notion-translator")


# =============================================================================
# Errors
# =============================================================================


class NotionTranslatorError(Exception):
    """Failure that ends the run with exit status 1."""

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.hint = hint


class ConfigurationError(NotionTranslatorError):
    """A required credential is missing or unreadable."""


class LanguageValidationError(NotionTranslatorError):
    """A language code is not supported by the translation backend."""


class LocatorError(NotionTranslatorError):
    """The URL does not resolve to a page this tool can translate."""

    def __init__(self, message: str, hint: str | None = None, is_database: bool = False):
        super().__init__(message, hint)
        self.is_database = is_database


class BackendRequestError(NotionTranslatorError):
    """A request to a remote service failed.

    Keeps the request payload and the raw response body so that --debug can
    show exactly what was sent and what came back.
    """

    def __init__(
        self,
        message: str,
        payload: Optional[dict] = None,
        response_text: Optional[str] = None,
        hint: str | None = None
    ):
        super().__init__(message, hint)
        self.payload = payload
        self.response_text = response_text


class TranslationBackendError(BackendRequestError):
    """DeepL rejected or failed a translation request."""


class UpdateRequestError(BackendRequestError):
    """Notion rejected or failed a block/page update."""


HINTS = {
    "no_access": (
        "Please make sure the following:\n"
        " * The page is shared with your app\n"
        " * The API token is the one for this workspace"
    ),
    "database": "Open a page (not a database) in Notion and copy its URL.",
    "notion_token": (
        "Head to https://www.notion.so/my-integrations, create a new app with "
        '"Read Content" and "Insert Content" permissions, and share your Notion '
        "page with the app. Once you get a token, set NOTION_API_TOKEN env "
        "variable to the token value."
    ),
    "deepl_token": (
        "Head to https://www.deepl.com/pro-api, sign up, and grab your API "
        "token. Once you get a token, set DEEPL_API_TOKEN env variable to the "
        "token value."
    ),
}


# =============================================================================
# HTTP Helpers
# =============================================================================

_async_client: Optional[httpx.AsyncClient] = None


def _http_error_detail(e: httpx.HTTPError, max_len: int = 300) -> str:
    """Extract error detail from an httpx error.

    Args:
        e: The HTTP error (status or transport).
        max_len: Maximum length of error detail to return.

    Returns:
        Truncated response text for status errors, else the error string.
    """
    if isinstance(e, httpx.HTTPStatusError) and e.response is not None:
        return f"{e.response.status_code} {e.response.text[:max_len]}"
    return str(e)


def _response_text(e: httpx.HTTPError) -> Optional[str]:
    if isinstance(e, httpx.HTTPStatusError) and e.response is not None:
        return e.response.text
    return None


async def _get_async_client() -> httpx.AsyncClient:
    """Get or create the async HTTP client shared by Notion and DeepL calls."""
    global _async_client
    if _async_client is None or _async_client.is_closed:
        _async_client = httpx.AsyncClient(timeout=30.0)
    return _async_client


async def _close_async_client() -> None:
    global _async_client
    if _async_client is not None and not _async_client.is_closed:
        await _async_client.aclose()
    _async_client = None


def _to_pretty_json(obj: Any) -> str:
    return json.dumps(obj, indent=2, ensure_ascii=False)


# =============================================================================
# Credential Management
# =============================================================================

NOTION_INTEGRATIONS_URL = "https://www.notion.so/my-integrations"
DEEPL_SIGNUP_URL = "https://www.deepl.com/pro-api"

_notion_token: Optional[str] = None
_deepl_token: Optional[str] = None


def _get_token() -> str:
    """Get the Notion token (set by load_credentials)."""
    if _notion_token is None:
        raise ConfigurationError("No Notion token loaded.", HINTS["notion_token"])
    return _notion_token


def _get_deepl_token() -> str:
    """Get the DeepL token (set by load_credentials)."""
    if _deepl_token is None:
        raise ConfigurationError("No DeepL token loaded.", HINTS["deepl_token"])
    return _deepl_token


def load_credentials(token_file: Optional[str] = None) -> tuple[str, str]:
    """Load the Notion and DeepL tokens.

    Values from a .env file override the process environment. When a token
    is missing, the page where one can be created is opened in a browser.

    Args:
        token_file: Optional path to a file holding the Notion token.

    Returns:
        Tuple of (notion_token, deepl_token).

    Raises:
        ConfigurationError: If a token is missing or the token file is unusable.
    """
    global _notion_token, _deepl_token

    load_dotenv(override=True)

    notion_token = os.environ.get("NOTION_API_TOKEN", "").strip()
    if token_file:
        token_path = Path(token_file).expanduser()
        if not token_path.exists():
            raise ConfigurationError(f"Token file not found: {token_path}")
        notion_token = token_path.read_text().strip()
        if not notion_token:
            raise ConfigurationError(f"Token file is empty: {token_path}")
        logger.debug(f"Notion token loaded from {token_path}")

    if not notion_token:
        webbrowser.open(NOTION_INTEGRATIONS_URL)
        raise ConfigurationError(
            "This tool requires a valid Notion API token.", HINTS["notion_token"]
        )

    deepl_token = os.environ.get("DEEPL_API_TOKEN", "").strip()
    if not deepl_token:
        webbrowser.open(DEEPL_SIGNUP_URL)
        raise ConfigurationError(
            "This tool requires a DeepL API token.", HINTS["deepl_token"]
        )

    _notion_token = notion_token
    _deepl_token = deepl_token
    return notion_token, deepl_token


# =============================================================================
# Language Codes
# =============================================================================

# https://www.deepl.com/docs-api/translating-text/request/
SUPPORTED_FROM_LANGS = (
    "BG",  # Bulgarian
    "CS",  # Czech
    "DA",  # Danish
    "DE",  # German
    "EL",  # Greek
    "EN",  # English
    "ES",  # Spanish
    "ET",  # Estonian
    "FI",  # Finnish
    "FR",  # French
    "HU",  # Hungarian
    "ID",  # Indonesian
    "IT",  # Italian
    "JA",  # Japanese
    "LT",  # Lithuanian
    "LV",  # Latvian
    "NL",  # Dutch
    "PL",  # Polish
    "PT",  # Portuguese (all varieties)
    "RO",  # Romanian
    "RU",  # Russian
    "SK",  # Slovak
    "SL",  # Slovenian
    "SV",  # Swedish
    "TR",  # Turkish
    "ZH",  # Chinese
)

SUPPORTED_TO_LANGS = (
    "BG",
    "CS",
    "DA",
    "DE",
    "EL",
    "EN-GB",  # English (British)
    "EN-US",  # English (American)
    "ES",
    "ET",
    "FI",
    "FR",
    "HU",
    "ID",
    "IT",
    "JA",
    "LT",
    "LV",
    "NL",
    "PL",
    "PT-PT",  # Portuguese (excluding Brazilian)
    "PT-BR",  # Portuguese (Brazilian)
    "RO",
    "RU",
    "SK",
    "SL",
    "SV",
    "TR",
    "ZH",
)


def printable_langs(langs: tuple[str, ...]) -> str:
    return ",".join(lang.lower() for lang in langs)


def validate_language(code: str, supported: tuple[str, ...]) -> str:
    """Normalize a language code and check it against a supported set.

    Returns:
        The upper-cased code.

    Raises:
        LanguageValidationError: If the code is not in the set.
    """
    normalized = code.strip().upper()
    if normalized not in supported:
        raise LanguageValidationError(
            f"{normalized} is not a supported language code.",
            f"Pass any of {','.join(supported)}"
        )
    return normalized


# =============================================================================
# Notion API Client
# =============================================================================

NOTION_API_BASE = "https://api.notion.com/v1"
NOTION_VERSION = "2025-09-03"

# Notion caps page_size for list endpoints at 100
MAX_PAGE_SIZE = 100


async def _notion_request_async(
    method: str,
    endpoint: str,
    json_body: Optional[dict] = None
) -> dict:
    """Make an authenticated async request to the Notion API.

    No retry: any failure is raised to the caller as httpx.HTTPError.
    """
    token = _get_token()
    client = await _get_async_client()

    headers = {
        "Authorization": f"Bearer {token}",
        "Notion-Version": NOTION_VERSION,
        "Content-Type": "application/json",
    }

    url = f"{NOTION_API_BASE}{endpoint}"

    if method == "GET":
        response = await client.get(url, headers=headers)
    elif method == "PATCH":
        response = await client.patch(url, headers=headers, json=json_body or {})
    else:
        raise ValueError(f"Unsupported method: {method}")

    response.raise_for_status()
    return response.json()


async def retrieve_page_async(page_id: str) -> dict:
    """Fetch page metadata and properties."""
    return await _notion_request_async("GET", f"/pages/{page_id}")


async def retrieve_database_async(database_id: str) -> dict:
    """Fetch database container metadata."""
    return await _notion_request_async("GET", f"/databases/{database_id}")


async def list_block_children_async(
    block_id: str,
    start_cursor: Optional[str] = None,
    page_size: int = MAX_PAGE_SIZE
) -> dict:
    """Fetch one page of a block's immediate children.

    Returns:
        The raw list response: results, has_more and next_cursor.
    """
    endpoint = f"/blocks/{block_id}/children?page_size={min(page_size, MAX_PAGE_SIZE)}"
    if start_cursor:
        endpoint += f"&start_cursor={start_cursor}"
    return await _notion_request_async("GET", endpoint)


# Top-level fields both update endpoints accept besides the payload itself
UPDATE_STATE_FIELDS = ("archived", "in_trash")


def _copy_state_fields(source: dict, body: dict) -> dict:
    for field_name in UPDATE_STATE_FIELDS:
        if field_name in source:
            body[field_name] = source[field_name]
    return body


def _block_update_body(block_type: str, block: dict) -> dict:
    """Project a prepared block onto the body accepted by PATCH /blocks/{id}.

    Children were written by their own update calls, so the children list
    is not sent again.
    """
    type_data = {
        k: v for k, v in (block.get(block_type) or {}).items() if k != "children"
    }
    return _copy_state_fields(block, {block_type: type_data})


def _page_update_body(page: dict) -> dict:
    """Project a prepared page onto the body accepted by PATCH /pages/{id}."""
    return _copy_state_fields(page, {"properties": page.get("properties", {})})


async def update_block_async(block_type: str, block: dict) -> dict:
    """Write a translated block back to Notion.

    Args:
        block_type: The block's type tag (already stripped from the block).
        block: Prepared block carrying block_id and its type payload.

    Raises:
        UpdateRequestError: If Notion rejects the update or is unreachable.
    """
    block_id = block["block_id"]
    body = _block_update_body(block_type, block)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Update block request params: {_to_pretty_json(block)}")

    try:
        return await _notion_request_async("PATCH", f"/blocks/{block_id}", body)
    except httpx.HTTPError as e:
        raise UpdateRequestError(
            f"Failed to update block {block_id}: {_http_error_detail(e)}",
            payload=body,
            response_text=_response_text(e)
        ) from e


async def update_page_async(page: dict) -> dict:
    """Write a translated page (title properties) back to Notion.

    Raises:
        UpdateRequestError: If Notion rejects the update or is unreachable.
    """
    page_id = page["page_id"]
    body = _page_update_body(page)
    try:
        return await _notion_request_async("PATCH", f"/pages/{page_id}", body)
    except httpx.HTTPError as e:
        raise UpdateRequestError(
            f"Failed to update page {page_id}: {_http_error_detail(e)}",
            payload=body,
            response_text=_response_text(e)
        ) from e


# =============================================================================
# DeepL API Client
# =============================================================================

DEEPL_API_URL = "https://api.deepl.com/v2/translate"
DEEPL_FREE_API_URL = "https://api-free.deepl.com/v2/translate"


def _deepl_api_url(token: str) -> str:
    # Free-tier keys carry a ":fx" suffix and live on a separate host
    if token.endswith(":fx"):
        return DEEPL_FREE_API_URL
    return DEEPL_API_URL


async def translate_text_async(text: str, source_lang: str, target_lang: str) -> str:
    """Translate a single text fragment with DeepL.

    Raises:
        TranslationBackendError: On any HTTP failure or an empty response.
    """
    token = _get_deepl_token()
    client = await _get_async_client()

    payload = {
        "text": [text],
        "source_lang": source_lang,
        "target_lang": target_lang,
    }
    headers = {
        "Authorization": f"DeepL-Auth-Key {token}",
        "Content-Type": "application/json",
    }

    try:
        response = await client.post(_deepl_api_url(token), headers=headers, json=payload)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise TranslationBackendError(
            f"DeepL translation failed: {_http_error_detail(e)}",
            payload=payload,
            response_text=_response_text(e)
        ) from e

    try:
        translations = response.json().get("translations") or []
        translated = translations[0]["text"] if translations else None
    except (ValueError, AttributeError, KeyError, IndexError, TypeError) as e:
        raise TranslationBackendError(
            f"DeepL returned an unreadable response: {e}",
            payload=payload,
            response_text=response.text
        ) from e

    if translated is None:
        raise TranslationBackendError(
            "DeepL returned no translations",
            payload=payload,
            response_text=response.text
        )
    return translated


# =============================================================================
# Rich Text Mutator
# =============================================================================


def set_span_text(span: dict, text: str) -> None:
    """Write text into a rich text span.

    plain_text and text.content are two views of the same string; this is
    the only place either is written.
    """
    span["plain_text"] = text
    if isinstance(span.get("text"), dict):
        span["text"]["content"] = text


async def translate_rich_text_async(
    spans: list[dict],
    source_lang: str,
    target_lang: str
) -> None:
    """Translate a rich_text array in place, one DeepL call per non-empty span.

    Bold results are padded with a space on each side; without it Notion
    renders a bold run glued to the neighbouring text.
    """
    for span in spans:
        plain_text = span.get("plain_text")
        if not plain_text:
            continue

        translated = await translate_text_async(plain_text, source_lang, target_lang)
        if (span.get("annotations") or {}).get("bold"):
            translated = f" {translated} "
        set_span_text(span, translated)


# =============================================================================
# Node Classifier
# =============================================================================

# Never modified or resubmitted
EXCLUDED_BLOCK_TYPES = frozenset({
    "mention", "unsupported", "child_page", "child_database"
})

# https://developers.notion.com/reference/patch-block-children
# > For blocks that allow children, we allow up to two levels of nesting in a single request.
MAX_NESTING_DEPTH = 2

# Read-only fields the update endpoints reject
SERVER_MANAGED_FIELDS = (
    "id", "type", "cover",
    "created_time", "last_edited_time",
    "created_by", "last_edited_by",
)

# File-source data the block update endpoint rejects on images
IMAGE_SOURCE_FIELDS = ("type", "file", "external")

RICH_TEXT_BLOCK_TYPES = (
    "paragraph", "heading_1", "heading_2", "heading_3",
    "bulleted_list_item", "numbered_list_item", "to_do",
    "toggle", "quote", "callout", "template",
)

CAPTION_BLOCK_TYPES = (
    "image", "video", "file", "pdf", "audio", "bookmark", "embed",
)

TRANSLATION_UNIT_KEYS = ("rich_text", "caption")

# Block type -> payload fields holding translatable rich text.
# Code text is never translated; only its caption is.
TRANSLATABLE_FIELDS: dict[str, tuple[str, ...]] = {
    **{block_type: ("rich_text",) for block_type in RICH_TEXT_BLOCK_TYPES},
    **{block_type: ("caption",) for block_type in CAPTION_BLOCK_TYPES},
    "code": ("caption",),
}


class BlockAction(Enum):
    """What the walker does with a fetched block."""
    EXCLUDE = auto()           # never written, children never fetched
    DEPTH_EXHAUSTED = auto()   # too deep to express in any request
    FLATTEN_CHILDREN = auto()  # column_list one level down: written with no children
    LEAF = auto()              # written without touching children
    RECURSE = auto()           # children translated first, then written


def classify_block(block: dict, depth: int) -> BlockAction:
    """Decide how a block at the given depth (root children = 0) is handled."""
    block_type = block.get("type")

    if block_type in EXCLUDED_BLOCK_TYPES:
        return BlockAction.EXCLUDE
    if depth > MAX_NESTING_DEPTH:
        return BlockAction.DEPTH_EXHAUSTED
    if block_type == "column_list" and depth == 1:
        # Columns already one level down cannot carry another level of children
        return BlockAction.FLATTEN_CHILDREN
    if depth >= MAX_NESTING_DEPTH:
        return BlockAction.LEAF
    if block.get("has_children"):
        return BlockAction.RECURSE
    return BlockAction.LEAF


def prepare_block_for_write(block: dict, depth: int, action: BlockAction) -> dict:
    """Build the working copy of a block that will be translated and written.

    Applies the structural edits for its depth and type. The type payload is
    copied; rich text arrays inside it are shared with the fetched block.
    """
    block_type = block["type"]
    prepared = dict(block)
    prepared["block_id"] = block["id"]

    type_data = dict(prepared.get(block_type) or {})
    prepared[block_type] = type_data

    if depth >= MAX_NESTING_DEPTH:
        prepared["has_children"] = False

    if action is BlockAction.FLATTEN_CHILDREN:
        type_data["children"] = []

    if block_type == "image":
        for field_name in IMAGE_SOURCE_FIELDS:
            type_data.pop(field_name, None)

    return prepared


def strip_server_managed_fields(obj: dict) -> dict:
    """Remove read-only metadata in place. Applying it twice is a no-op."""
    for field_name in SERVER_MANAGED_FIELDS:
        obj.pop(field_name, None)
    return obj


def translatable_fields(block_type: str, type_data: dict) -> list[str]:
    """Names of the rich text arrays in a block payload that get translated.

    Unregistered block types fall back to whichever of rich_text/caption
    they carry.
    """
    candidates = TRANSLATABLE_FIELDS.get(block_type, TRANSLATION_UNIT_KEYS)
    return [
        name for name in candidates
        if isinstance(type_data.get(name), list)
        and not (name == "rich_text" and block_type == "code")
    ]


# =============================================================================
# Block Tree Walker
# =============================================================================


def _print_progress() -> None:
    # One dot per fetched page of children
    sys.stdout.write(".")
    sys.stdout.flush()


async def _translate_block_async(
    block: dict,
    depth: int,
    source_lang: str,
    target_lang: str
) -> Optional[dict]:
    """Translate and write back one block, children first.

    Returns:
        The written payload without its own children list, or None if the
        block was skipped.
    """
    block_type = block.get("type")
    action = classify_block(block, depth)

    if action in (BlockAction.EXCLUDE, BlockAction.DEPTH_EXHAUSTED):
        logger.debug(
            f"Skipping {block_type} block {block.get('id')} "
            f"({action.name.lower()}, depth {depth})"
        )
        return None

    prepared = prepare_block_for_write(block, depth, action)

    if action is BlockAction.RECURSE:
        prepared[block_type]["children"] = await translate_block_tree_async(
            block["id"], depth + 1, source_lang, target_lang
        )

    strip_server_managed_fields(prepared)

    type_data = prepared[block_type]
    for name in translatable_fields(block_type, type_data):
        await translate_rich_text_async(type_data[name], source_lang, target_lang)

    await update_block_async(block_type, prepared)

    # The parent only needs this level; grandchildren are already written
    summary = dict(prepared)
    summary[block_type] = {k: v for k, v in type_data.items() if k != "children"}
    return summary


async def translate_block_tree_async(
    parent_id: str,
    depth: int,
    source_lang: str,
    target_lang: str
) -> list[dict]:
    """Translate every block under parent_id, depth-first and in order.

    Each subtree is fully translated and written before its parent is
    written and before the next sibling is visited. Any failure propagates
    immediately; blocks already written stay translated.

    Args:
        parent_id: Page or block whose children are walked.
        depth: Depth of those children below the page (root children = 0).
        source_lang: DeepL source language code.
        target_lang: DeepL target language code.

    Returns:
        The update payloads written at this level, in order, each without
        its nested children.
    """
    written: list[dict] = []
    start_cursor = None

    while True:
        result = await list_block_children_async(parent_id, start_cursor=start_cursor)
        blocks = result.get("results", [])

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Fetched original blocks: {_to_pretty_json(blocks)}")
        _print_progress()

        for block in blocks:
            payload = await _translate_block_async(block, depth, source_lang, target_lang)
            if payload is not None:
                written.append(payload)

        start_cursor = result.get("next_cursor")
        if not result.get("has_more") or not start_cursor:
            break

    return written


# =============================================================================
# Page Title Updater
# =============================================================================


def get_title_spans(page: dict) -> list[dict]:
    """Return the rich text array of a page's title property."""
    props = page.get("properties", {})

    title_prop = props.get("title")
    if title_prop is not None and "title" in title_prop:
        return title_prop["title"]

    # Fallback: find any title-type property
    for prop in props.values():
        if prop.get("type") == "title":
            return prop.setdefault("title", [])

    return []


async def update_translated_page_async(
    original_page: dict,
    source_lang: str,
    target_lang: str
) -> dict:
    """Translate the page title and write it back.

    Works on a deep copy; original_page is left untouched.

    Returns:
        The update response from Notion.
    """
    page = copy.deepcopy(original_page)
    page["page_id"] = original_page["id"]

    await translate_rich_text_async(get_title_spans(page), source_lang, target_lang)

    strip_server_managed_fields(page)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Update page request params: {_to_pretty_json(page)}")

    response = await update_page_async(page)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(f"Update page response: {_to_pretty_json(response)}")
    return response


# =============================================================================
# Orchestrator
# =============================================================================

UUID_SUFFIX_PATTERN = re.compile(
    r'([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}|[0-9a-f]{32})$',
    re.IGNORECASE
)


def normalize_uuid(uuid_str: str) -> str:
    """Turn a 32-hex page id (dashed or not) into Notion's dashed form.

    Notion URLs carry ids without dashes; the API answers with dashed ones.

    Raises:
        ValueError: If the id is not 32 hex digits once dashes are removed.
    """
    clean = uuid_str.replace('-', '').lower()
    if len(clean) != 32:
        raise ValueError(f"Invalid UUID length: {uuid_str}")
    if not all(c in '0123456789abcdef' for c in clean):
        raise ValueError(f"Invalid UUID characters: {uuid_str}")
    return f"{clean[:8]}-{clean[8:12]}-{clean[12:16]}-{clean[16:20]}-{clean[20:]}"


def extract_content_id(url: str) -> str:
    """Extract the page/database id from a Notion URL.

    Handles formats like:
    - https://www.notion.so/workspace/Page-Title-abc123def456...
    - https://www.notion.so/abc123de-f456-...   (dashed UUID)
    - any of the above with ?query or #fragment

    Returns:
        Normalized UUID when the last path segment ends in one, otherwise the
        part of that segment after its last dash.
    """
    path = re.split(r'[?#]', url, maxsplit=1)[0].rstrip('/')
    segment = path.split('/')[-1]

    uuid_match = UUID_SUFFIX_PATTERN.search(segment)
    if uuid_match:
        return normalize_uuid(uuid_match.group(1))

    return segment.split('-')[-1]


async def retrieve_page_or_fail_async(content_id: str) -> dict:
    """Retrieve a page, explaining the failure when the id is not one.

    Raises:
        LocatorError: is_database is True when the id names a database.
    """
    try:
        return await retrieve_page_async(content_id)
    except httpx.HTTPError as page_error:
        try:
            await retrieve_database_async(content_id)
        except httpx.HTTPError:
            raise LocatorError(
                "Failed to read the page content!\n\n"
                f"Error details: {_http_error_detail(page_error)}",
                HINTS["no_access"]
            ) from page_error

        raise LocatorError(
            "This URL is a database. This tool currently supports only pages.",
            HINTS["database"],
            is_database=True
        ) from page_error


async def translate_page_async(url: str, source_lang: str, target_lang: str) -> None:
    """Translate the Notion page at url in place.

    The title is written before the body is walked. If the walk then fails,
    the page is left with a translated title and a partially translated body;
    nothing is rolled back.
    """
    content_id = extract_content_id(url)

    try:
        original_page = await retrieve_page_or_fail_async(content_id)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Original page content: {_to_pretty_json(original_page)}")

        sys.stdout.write(
            "\nWait a minute! Now translating the following Notion page:\n"
            f"{url}\n\n(this may take some time) ..."
        )
        sys.stdout.flush()

        await update_translated_page_async(original_page, source_lang, target_lang)

        try:
            await translate_block_tree_async(original_page["id"], 0, source_lang, target_lang)
        except (NotionTranslatorError, httpx.HTTPError):
            logger.error(
                "The page title is already translated but the body is only "
                "partially translated; fix or re-run on a fresh copy."
            )
            raise
    finally:
        await _close_async_client()

    print(
        "... Done!\n\nDisclaimer:\nSome parts might not be perfect.\n"
        "If the generated page is missing something, please adjust the "
        "details on your own.\n"
    )


# =============================================================================
# Main Entry Point
# =============================================================================


def _report_failure(error: NotionTranslatorError, debug: bool) -> None:
    logger.error(f"ERROR: {error.message}")
    if error.hint:
        logger.error(error.hint)
    if debug and isinstance(error, BackendRequestError):
        if error.payload is not None:
            logger.debug(f"Request payload: {_to_pretty_json(error.payload)}")
        if error.response_text is not None:
            logger.debug(f"Response body: {error.response_text}")


def main(argv: Optional[list[str]] = None) -> None:
    """Translate a Notion page from the command line.

    Usage:
        notion-translator --url https://www.notion.so/... --from en --to de
    """
    import argparse

    class _Parser(argparse.ArgumentParser):
        # Usage errors exit with 1 like every other failure, help included
        def error(self, message):
            self.print_help(sys.stderr)
            self.exit(1, f"\nerror: {message}\n")

    parser = _Parser(
        prog="notion-translator",
        description="CLI to translate a Notion page to a different language"
    )
    parser.add_argument(
        "-u", "--url",
        required=True,
        metavar="<https://www.notion.so/...>",
        help="URL of the page to translate"
    )
    parser.add_argument(
        "-f", "--from",
        dest="source_lang",
        required=True,
        metavar=f"<{printable_langs(SUPPORTED_FROM_LANGS)}>",
        help="Source language code"
    )
    parser.add_argument(
        "-t", "--to",
        dest="target_lang",
        required=True,
        metavar=f"<{printable_langs(SUPPORTED_TO_LANGS)}>",
        help="Target language code"
    )
    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Log request and response payloads"
    )
    parser.add_argument(
        "--token-file",
        help="Path to file containing Notion API token (overrides NOTION_API_TOKEN)"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )
    if not args.debug:
        logging.getLogger("httpx").setLevel(logging.WARNING)

    try:
        load_credentials(args.token_file)
        source_lang = validate_language(args.source_lang, SUPPORTED_FROM_LANGS)
        target_lang = validate_language(args.target_lang, SUPPORTED_TO_LANGS)

        logger.debug(f"Passed options: {_to_pretty_json(vars(args))}")

        asyncio.run(translate_page_async(args.url, source_lang, target_lang))
    except NotionTranslatorError as e:
        _report_failure(e, args.debug)
        raise SystemExit(1)
    except httpx.HTTPError as e:
        logger.error(f"ERROR: Notion request failed: {_http_error_detail(e)}")
        if args.debug:
            if isinstance(e, httpx.HTTPStatusError):
                logger.debug(f"Request: {e.request.method} {e.request.url}")
            response_text = _response_text(e)
            if response_text is not None:
                logger.debug(f"Response body: {response_text}")
        raise SystemExit(1)


if __name__ == "__main__":
    main()
