"""
Synonym Grouper

Resolves heterogeneous ground-truth payloads (grouped lists, flat keyword
lists, a single string needing a split) into one canonical representation:
an ordered list of synonym groups, one group per answer slot.

Flat keyword lists for single-slot questions are clustered with a greedy,
single-pass substring/acronym heuristic. The pass is intentionally not
transitively closed: a term merged into a group never triggers further
scans on the group's behalf, so ["a b", "ab", "xab"] yields two groups.
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple, Union

from .normalizer import normalize, is_acronym_of
from .splitter import split_on_separators
from ..utils.logging import get_logger

logger = get_logger(__name__)

Groups = List[List[str]]


@dataclass(frozen=True)
class Grouped:
    """Ground truth already given as synonym groups."""
    groups: Tuple[Tuple[str, ...], ...]


@dataclass(frozen=True)
class Flat:
    """Ground truth given as a flat list of terms."""
    terms: Tuple[str, ...]


GroundTruth = Union[Grouped, Flat]


def resolve_ground_truth(raw: Any) -> GroundTruth:
    """
    Tag a raw ground-truth payload.

    ``None`` becomes an empty flat list, a bare string a one-term flat list.
    A list holding any nested list is grouped; scalars inside a grouped
    payload become singleton groups.
    """
    if isinstance(raw, (Grouped, Flat)):
        return raw
    if raw is None:
        return Flat(())
    if isinstance(raw, str):
        return Flat((raw,))
    if not isinstance(raw, (list, tuple)):
        return Flat((str(raw),))

    if any(isinstance(item, (list, tuple)) for item in raw):
        groups = []
        for item in raw:
            if isinstance(item, (list, tuple)):
                groups.append(tuple(str(member) for member in item if member is not None))
            elif item is not None:
                groups.append((str(item),))
            else:
                groups.append(())
        return Grouped(tuple(groups))

    return Flat(tuple(str(item) for item in raw if item is not None))


def _normalized_group(members: Sequence[str], case_sensitive: bool) -> List[str]:
    """Normalize members, dropping empties and duplicates (order kept)."""
    group: List[str] = []
    for member in members:
        norm = normalize(member, case_sensitive)
        if norm and norm not in group:
            group.append(norm)
    return group


def _fit_groups(groups: Groups, required_slots: int) -> Groups:
    """Pad with empty groups or truncate extras."""
    if len(groups) != required_slots:
        logger.debug(f"Reconciling {len(groups)} ground-truth groups to {required_slots} slots")
    fitted = groups[:required_slots]
    fitted.extend([] for _ in range(required_slots - len(fitted)))
    return fitted


def cluster_synonyms(terms: Sequence[str], case_sensitive: bool = False) -> Groups:
    """
    Greedy single-pass clustering of flat keywords.

    Each unvisited term opens a group; later unvisited terms join it when
    one normalized form contains the other or one is an acronym of the other.
    """
    entries = [(term, normalize(term, case_sensitive)) for term in terms]
    entries = [(raw, norm) for raw, norm in entries if norm]
    visited = [False] * len(entries)
    groups: Groups = []

    for i, (raw_a, norm_a) in enumerate(entries):
        if visited[i]:
            continue
        visited[i] = True
        group = [norm_a]

        for j in range(i + 1, len(entries)):
            if visited[j]:
                continue
            raw_b, norm_b = entries[j]
            substring_match = norm_a in norm_b or norm_b in norm_a
            acronym_match = is_acronym_of(raw_a, raw_b) or is_acronym_of(raw_b, raw_a)
            if substring_match or acronym_match:
                visited[j] = True
                if norm_b not in group:
                    group.append(norm_b)

        groups.append(group)

    return groups


def build_groups(ground_truth: Any, required_slots: int,
                 case_sensitive: bool = False) -> Groups:
    """
    Resolve ground truth into exactly ``required_slots`` synonym groups.

    Args:
        ground_truth: Raw payload or an already tagged GroundTruth
        required_slots: Number of expected answer slots
        case_sensitive: Keep casing during normalization

    Returns:
        Ordered list of normalized synonym groups
    """
    required_slots = max(required_slots, 0)
    truth = resolve_ground_truth(ground_truth)

    if isinstance(truth, Grouped):
        groups = [_normalized_group(g, case_sensitive) for g in truth.groups]
        return _fit_groups(groups, required_slots)

    terms = list(truth.terms)

    if len(terms) == required_slots:
        return [_normalized_group([term], case_sensitive) for term in terms]

    if len(terms) == 1 and required_slots > 1:
        fragments = split_on_separators(terms[0])
        groups = [_normalized_group([fragment], case_sensitive) for fragment in fragments]
        return _fit_groups(groups, required_slots)

    if required_slots == 1 and terms:
        return cluster_synonyms(terms, case_sensitive)

    # Best-effort positional assignment
    groups = [_normalized_group([term], case_sensitive) for term in terms]
    return _fit_groups(groups, required_slots)


def keyword_groups(ground_truth: Any, case_sensitive: bool = False) -> Groups:
    """
    Keyword groups for a single-slot free-text answer.

    Grouped payloads keep every group (each is a required concept); flat
    lists are clustered. Empty groups are dropped.
    """
    truth = resolve_ground_truth(ground_truth)
    if isinstance(truth, Grouped):
        groups = build_groups(truth, len(truth.groups), case_sensitive)
    else:
        groups = build_groups(truth, 1, case_sensitive)
    return [group for group in groups if group]


def flatten_groups(groups: Optional[Groups]) -> List[str]:
    """All synonyms across groups, first occurrence order."""
    seen: List[str] = []
    for group in groups or []:
        for member in group:
            if member not in seen:
                seen.append(member)
    return seen
