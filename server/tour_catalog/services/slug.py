"""URL-safe identifiers derived from tour names."""

from slugify import slugify


def derive_slug(name: str) -> str:
    """
    Derive the slug for a tour name.

    Lowercases, collapses every run of whitespace or other
    non-alphanumeric characters into a single ``-`` and strips
    separators from both ends. Non-ASCII letters are transliterated.
    Applying it to its own output returns the same slug.
    """
    return slugify(name, lowercase=True, separator="-")
