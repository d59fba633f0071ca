"""URL-safe slug generation utilities."""

import re
import unicodedata


def slugify(text: str) -> str:
    """Convert text to a URL-safe slug (lowercase, hyphens, only a-z, 0-9 and "-").

    Accented letters are folded to their ASCII base before filtering, so
    "Café Talk" becomes "cafe-talk" rather than dropping the letter ("caf-talk").
    Characters with no ASCII decomposition (e.g. CJK) are still dropped.

    Args:
        text: Text to slugify (e.g. "Roland Garros Talk!").

    Returns:
        Slugified text (e.g. "roland-garros-talk"). May be empty when the
        text has no letters or digits (e.g. "!!!").
    """
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = text.lower().strip()
    text = re.sub(r"\s+", "-", text)
    text = re.sub(r"[^a-z0-9-]", "", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-")
