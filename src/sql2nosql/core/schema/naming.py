"""Name normalization for table/collection matching.

Everything that guesses a relationship from names goes through this module:
id-suffix stripping, id-like detection and singular/plural variants. Matching
is case-insensitive throughout.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

ID_SUFFIXES = ("_id", "id")


def is_id_like(name: str) -> bool:
    """Return True for identifier-looking column names (``id``, ``artist_id``, ``ArtistId``)."""
    return name.lower().endswith("id")


def strip_id_suffix(name: str) -> str:
    """Remove a trailing ``_id`` or ``id`` (case-insensitive).

    Returns the remaining prefix with its original casing. The result may be
    empty (``"id"`` -> ``""``).

    Example:
        >>> strip_id_suffix("artist_id")
        'artist'
        >>> strip_id_suffix("ArtistId")
        'Artist'
    """
    lower = name.lower()
    for suffix in ID_SUFFIXES:
        if lower.endswith(suffix):
            return name[: -len(suffix)]
    return name


def plural_forms(name: str) -> List[str]:
    """Plural candidates for ``name`` (``+s`` and ``+es``)."""
    if not name:
        return []
    return [f"{name}s", f"{name}es"]


def singular_forms(name: str) -> List[str]:
    """Singular candidates for ``name`` (drop ``es`` or ``s``)."""
    lower = name.lower()
    forms = []
    if lower.endswith("es") and len(name) > 2:
        forms.append(name[:-2])
    if lower.endswith("s") and len(name) > 1:
        forms.append(name[:-1])
    return forms


def name_variants(name: str, include_singular: bool = True) -> List[str]:
    """Lowercased name, plural and (optionally) singular variants, without duplicates."""
    forms = [name, *plural_forms(name)]
    if include_singular:
        forms.extend(singular_forms(name))

    variants: List[str] = []
    for candidate in forms:
        lowered = candidate.lower()
        if lowered and lowered not in variants:
            variants.append(lowered)
    return variants


def match_name(
    name: str, candidates: Iterable[str], include_singular: bool = True
) -> Optional[str]:
    """Find the candidate whose name matches ``name`` or one of its variants.

    Exact (case-insensitive) matches win over plural or singular ones;
    within the same variant, candidates are tried in the given order.

    Args:
        name: Name to look up (e.g. an embedded field name)
        candidates: Known names (e.g. collection or table names)
        include_singular: Also try singular forms of ``name``

    Returns:
        The matching candidate with its original casing, or None
    """
    by_lower = {}
    for candidate in candidates:
        by_lower.setdefault(candidate.lower(), candidate)

    for variant in name_variants(name, include_singular=include_singular):
        if variant in by_lower:
            return by_lower[variant]
    return None
