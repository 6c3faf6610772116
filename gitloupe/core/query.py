"""
Query — Filter, search and sort over snapshot objects

All functions take and return plain lists; the snapshot is never modified.

Sort methods:
    none        scan order
    date-desc   commits newest first (author time), then everything else
    date-asc    commits oldest first, then everything else
    type        by type name
    size-desc   largest first
    size-asc    smallest first
    hash        by hash
"""

from typing import List, Optional, Iterable

from .objects import EnrichedObject, ObjectType, TreeContent, BlobContent
from .decoder import extract_timestamp


SORT_METHODS = ("none", "date-desc", "date-asc", "type", "size-desc", "size-asc", "hash")


def filter_by_type(objects: Iterable[EnrichedObject], object_type: Optional[str]) -> List[EnrichedObject]:
    """Keep objects of one type. None or "all" keeps everything."""
    if not object_type or object_type == "all":
        return list(objects)
    wanted = ObjectType.parse(object_type)
    return [obj for obj in objects if obj.object_type is wanted]


def searchable_text(obj: EnrichedObject) -> str:
    """
    Text a search term is matched against.

    Trees contribute entry names, binary blobs nothing, everything else
    its decoded payload.
    """
    parsed = obj.parsed
    if isinstance(parsed, TreeContent):
        return "\n".join(entry.name for entry in parsed.entries)
    if isinstance(parsed, BlobContent) and parsed.is_binary:
        return ""
    return obj.text()


def search(objects: Iterable[EnrichedObject], term: Optional[str]) -> List[EnrichedObject]:
    """Case-insensitive substring match on hash or content."""
    term = (term or "").strip().lower()
    if not term:
        return list(objects)
    return [
        obj for obj in objects
        if term in obj.hash or term in searchable_text(obj).lower()
    ]


def commit_timestamp(obj: EnrichedObject) -> int:
    header = obj.parsed_commit
    if header is None:
        return 0
    return extract_timestamp(header.author)


def _date_key(obj: EnrichedObject, newest_first: bool):
    # Commits sort first; Python's sort is stable so non-commits keep order
    if obj.parsed_commit is None:
        return (1, 0)
    timestamp = commit_timestamp(obj)
    return (0, -timestamp if newest_first else timestamp)


def sort_objects(objects: Iterable[EnrichedObject], method: str = "none") -> List[EnrichedObject]:
    """
    Return a sorted copy.

    Raises:
        ValueError: Unknown sort method
    """
    if method not in SORT_METHODS:
        raise ValueError(f"Unknown sort method '{method}'. Valid: {', '.join(SORT_METHODS)}")

    result = list(objects)
    if method == "date-desc":
        result.sort(key=lambda o: _date_key(o, newest_first=True))
    elif method == "date-asc":
        result.sort(key=lambda o: _date_key(o, newest_first=False))
    elif method == "type":
        result.sort(key=lambda o: o.object_type.value)
    elif method == "size-desc":
        result.sort(key=lambda o: o.size, reverse=True)
    elif method == "size-asc":
        result.sort(key=lambda o: o.size)
    elif method == "hash":
        result.sort(key=lambda o: o.hash)
    return result


def select(
    objects: Iterable[EnrichedObject],
    object_type: Optional[str] = None,
    term: Optional[str] = None,
    method: str = "none",
    limit: Optional[int] = None
) -> List[EnrichedObject]:
    """Filter, search, sort and cap in one pass, as the list view applies them."""
    result = sort_objects(search(filter_by_type(objects, object_type), term), method)
    if limit is not None and limit >= 0:
        result = result[:limit]
    return result
