"""Input sanitizing and validation for indexing jobs"""

import re
from typing import List, Optional
from urllib.parse import urlparse

from app.core.errors import ValidationError
from app.features.indexing.domain import MAX_JOB_NAME_LENGTH

_SCRIPT_BLOCK = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_HTML_TAG = re.compile(r"<[^>]*>")
_SCRIPT_SCHEME = re.compile(r"(?:javascript|vbscript):", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.IGNORECASE)
_JOB_NAME = re.compile(r"^[a-zA-Z0-9\s\-_#]+$")


def sanitize_input(value: Optional[str]) -> str:
    """Strip markup and script vectors from free text"""
    if not value:
        return ""
    value = _SCRIPT_BLOCK.sub("", value)
    value = _HTML_TAG.sub("", value)
    value = _SCRIPT_SCHEME.sub("", value)
    value = _EVENT_HANDLER.sub("", value)
    return value.strip()


def is_valid_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    host = parsed.hostname or ""
    return parsed.scheme in ("http", "https") and len(host) >= 3 and "." in host


def validate_job_name(name: Optional[str]) -> str:
    """Sanitize a job name and check length and allowed characters"""
    cleaned = sanitize_input(name)
    if not cleaned:
        raise ValidationError("Job name is required", user_message="Job name is required")
    if len(cleaned) > MAX_JOB_NAME_LENGTH:
        raise ValidationError(
            f"Job name exceeds {MAX_JOB_NAME_LENGTH} characters",
            user_message=f"Job name must be at most {MAX_JOB_NAME_LENGTH} characters",
        )
    if not _JOB_NAME.match(cleaned):
        raise ValidationError(
            f"Job name contains invalid characters: {cleaned!r}",
            user_message="Job name can only contain letters, numbers, spaces, hyphens, underscores and #",
        )
    return cleaned


def validate_urls(urls: Optional[List[str]]) -> List[str]:
    """
    Check a manual job's URL list.

    Returns:
        The trimmed URLs in their original order with duplicates removed

    Raises:
        ValidationError: The list is empty or contains invalid URLs
            (listed under details["invalid_urls"])
    """
    cleaned = [u.strip() for u in (urls or []) if u and u.strip()]
    if not cleaned:
        raise ValidationError(
            "Manual jobs require at least one URL",
            user_message="At least one URL is required for manual jobs",
        )

    invalid = [u for u in cleaned if not is_valid_url(u)]
    if invalid:
        raise ValidationError(
            f"{len(invalid)} invalid URLs submitted",
            user_message="Invalid URLs provided",
            details={"invalid_urls": invalid},
        )

    return list(dict.fromkeys(cleaned))


def validate_sitemap_url(sitemap_url: Optional[str]) -> str:
    cleaned = (sitemap_url or "").strip()
    if not cleaned:
        raise ValidationError(
            "Sitemap jobs require a sitemap URL",
            user_message="Sitemap URL is required for sitemap jobs",
        )
    if not is_valid_url(cleaned):
        raise ValidationError(
            f"Invalid sitemap URL: {cleaned}",
            user_message="Invalid sitemap URL",
            details={"sitemap_url": cleaned},
        )
    return cleaned
