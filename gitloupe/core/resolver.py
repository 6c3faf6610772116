"""
Hash Resolver — Turn user references into snapshot objects

Enables users to reference objects by:
- Full hash (exact match, case-insensitive)
- Alias code (AA-BB, from the presentation codec)
- Hash prefix (4+ hex characters)
- Keywords in a commit/tag subject or a tree entry name

Provides clear feedback on ambiguous or missing matches.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, TYPE_CHECKING

from .objects import EnrichedObject, TreeContent

if TYPE_CHECKING:
    from .snapshot import Snapshot
    from ..presentation.codec import HashCodec


MAX_CANDIDATES = 10
MAX_SUGGESTIONS = 5


class ResolveStatus(Enum):
    """Resolution outcome."""
    FOUND = "found"
    AMBIGUOUS = "ambiguous"
    NOT_FOUND = "not_found"


@dataclass
class ResolveResult:
    """Result of hash resolution."""
    status: ResolveStatus
    obj: Optional[EnrichedObject] = None
    candidates: List[EnrichedObject] = field(default_factory=list)
    query: str = ""


def subject_of(obj: EnrichedObject) -> str:
    """First message line of a commit or tag, else ""."""
    header = obj.parsed_commit or obj.parsed_tag
    if header is None:
        return ""
    return header.message.split('\n', 1)[0]


class HashResolver:
    """
    Reference resolution against one snapshot.

    Resolution strategies (in order):
    1. Exact hash
    2. Alias code
    3. Prefix match (4+ chars)
    4. Keyword match (subjects, tree entry names)
    """

    def __init__(self, snapshot: 'Snapshot', codec: Optional['HashCodec'] = None):
        self.snapshot = snapshot
        self.codec = codec

    def resolve(self, query: str, min_prefix_length: int = 4) -> ResolveResult:
        """
        Resolve a user-provided reference to an object.

        Args:
            query: User input (hash, alias, prefix, or keyword)
            min_prefix_length: Minimum chars for prefix matching
        """
        query = (query or "").strip()
        if not query:
            return ResolveResult(status=ResolveStatus.NOT_FOUND, query=query)

        # Strategy 1: Exact match
        obj = self.snapshot.lookup(query)
        if obj is not None:
            return ResolveResult(status=ResolveStatus.FOUND, obj=obj, query=query)

        objects = list(self.snapshot.objects)

        # Strategy 2: Alias code
        if self.codec is not None and self.codec.is_short_code(query):
            hashes = self.codec.decode_all(query, self.snapshot.hashes())
            matches = [self.snapshot.lookup(h) for h in hashes]
            result = self._from_matches(matches, query)
            if result is not None:
                return result

        # Strategy 3: Prefix match
        query_lower = query.lower()
        if len(query) >= min_prefix_length:
            prefix_matches = [o for o in objects if o.hash.startswith(query_lower)]
            result = self._from_matches(prefix_matches, query)
            if result is not None:
                return result

        # Strategy 4: Keyword match
        keyword_matches = self._search_by_keyword(objects, query_lower)
        result = self._from_matches(keyword_matches, query)
        if result is not None:
            return result

        # Not found - suggest recent commits
        suggestions = [o for o in objects if o.parsed_commit is not None]
        return ResolveResult(
            status=ResolveStatus.NOT_FOUND,
            candidates=suggestions[:MAX_SUGGESTIONS],
            query=query
        )

    def _from_matches(self, matches: List[EnrichedObject], query: str) -> Optional[ResolveResult]:
        if len(matches) == 1:
            return ResolveResult(status=ResolveStatus.FOUND, obj=matches[0], query=query)
        if len(matches) > 1:
            return ResolveResult(
                status=ResolveStatus.AMBIGUOUS,
                candidates=matches[:MAX_CANDIDATES],
                query=query
            )
        return None

    def _search_by_keyword(self, objects: List[EnrichedObject], keyword: str) -> List[EnrichedObject]:
        matches = []
        for obj in objects:
            if keyword in subject_of(obj).lower():
                matches.append(obj)
            elif isinstance(obj.parsed, TreeContent) and any(
                keyword in entry.name.lower() for entry in obj.parsed.entries
            ):
                matches.append(obj)
        return matches


def describe(obj: EnrichedObject, codec: Optional['HashCodec'] = None) -> str:
    """One-line label: "[AA-BB] type 3b18e512 subject"."""
    label = f"{obj.object_type.value} {obj.hash[:8]}"
    subject = subject_of(obj)
    if subject:
        label = f"{label} {subject[:40]}"
    if codec is not None:
        return codec.format_with_code(obj.hash, label)
    return label


def format_resolve_prompt(result: ResolveResult, codec: Optional['HashCodec'] = None) -> str:
    """Format resolution result for user display."""
    if result.status == ResolveStatus.FOUND:
        return f"Found: {describe(result.obj, codec)}"

    if result.status == ResolveStatus.AMBIGUOUS:
        lines = [f"Multiple matches for \"{result.query}\":\n"]
        for i, obj in enumerate(result.candidates, 1):
            lines.append(f"  {i}. {describe(obj, codec)}")
        lines.append("\nUse a longer hash prefix to pick one.")
        return "\n".join(lines)

    lines = [f"No match for \"{result.query}\".\n"]
    if result.candidates:
        lines.append("Commits:")
        for obj in result.candidates:
            lines.append(f"  {describe(obj, codec)}")
    lines.append("\nTry: gitloupe list --search <term>")
    return "\n".join(lines)
