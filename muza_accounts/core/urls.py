"""Public URL construction for stored assets."""

from typing import Optional

from muza_accounts.core.config import settings


def absolute_url(path: Optional[str], base_url: Optional[str] = None) -> Optional[str]:
    """
    Expand a stored relative path into an absolute URL.

    Already-absolute URLs (e.g. federated provider avatars) pass through.

    Example:
        >>> absolute_url("/uploads/profiles/a.png", "https://api.muza.life")
        'https://api.muza.life/uploads/profiles/a.png'
    """
    if not path:
        return None
    if path.startswith(("http://", "https://")):
        return path
    base = (base_url or settings.PUBLIC_BASE_URL).rstrip("/")
    return f"{base}/{path.lstrip('/')}"
