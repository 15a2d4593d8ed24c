"""Sibling and branch navigation over the corpus.

Navigation never caches: each call consults the current directory listing.
"""

from __future__ import annotations

import logging

from ..errors import ConsistencyViolation, ExhaustedSiblings, InvalidIdentifierShape, NotFound
from ..ids import is_sequence, parse_sequence, strip_leaf
from .store import Corpus

logger = logging.getLogger(__name__)


class Navigator:
    """Resolve identifiers and walk between siblings, branches and parents."""

    def __init__(self, corpus: Corpus):
        self.corpus = corpus

    def _sequences_under(self, base: str) -> dict[int, str]:
        """Map sequence number -> identifier for units whose base is exactly ``base``."""
        sequences: dict[int, str] = {}
        for identifier in self.corpus.identifiers_with_prefix(base):
            try:
                sub_base, leaf, numeric = strip_leaf(identifier)
            except InvalidIdentifierShape as e:
                logger.warning("Unable to strip sequence number of %r: %s", identifier, e)
                continue
            if sub_base != base or not numeric:
                continue
            sequences[parse_sequence(leaf, identifier)] = identifier
        return sequences

    def _split_sequence(self, identifier: str, operation: str) -> tuple[str, int]:
        base, leaf, numeric = strip_leaf(identifier)
        if not numeric:
            raise InvalidIdentifierShape(
                f"{identifier!r} is a branch, not a sequence position",
                {"operation": operation, "identifier": identifier},
            )
        return base, parse_sequence(leaf, identifier)

    def first_in_branch(self, branch: str) -> str:
        """Return the lowest-numbered unit directly in ``branch``.

        A sequence number of 0 is by convention always the lowest, so the
        scan stops there.
        """
        lowest: int | None = None
        for identifier in self.corpus.identifiers_with_prefix(branch):
            try:
                base, leaf, numeric = strip_leaf(identifier)
            except InvalidIdentifierShape as e:
                logger.warning("Unable to strip leaf of %r: %s", identifier, e)
                continue
            if base != branch or not numeric:
                continue
            number = parse_sequence(leaf, identifier)
            if number == 0:
                lowest = 0
                break
            if lowest is None or number < lowest:
                lowest = number

        if lowest is None:
            raise NotFound(
                f"Unable to find branch: {branch!r}",
                {"operation": "first_in_branch", "identifier": branch},
            )
        return f"{branch}{lowest}"

    def next(self, identifier: str) -> str:
        """The following sibling, skipping over gaps in the sequence."""
        base, number = self._split_sequence(identifier, "next")

        candidate = f"{base}{number + 1}"
        if self.corpus.exists(candidate):
            return candidate

        later = [n for n in self._sequences_under(base) if n > number]
        if not later:
            raise ExhaustedSiblings(
                f"No zettel after {identifier!r}",
                {"operation": "next", "identifier": identifier},
            )
        return f"{base}{min(later)}"

    def previous(self, identifier: str) -> str:
        """The preceding sibling, or the parent zettel at the start of a branch."""
        base, number = self._split_sequence(identifier, "previous")

        candidate = f"{base}{number - 1}"
        if number - 1 < 1:
            if number - 1 >= 0 and self.corpus.exists(candidate):
                return candidate
            return self._parent_of_branch(identifier, base)

        if self.corpus.exists(candidate):
            return candidate

        earlier = [n for n in self._sequences_under(base) if n < number]
        if not earlier:
            raise ExhaustedSiblings(
                f"No zettel before {identifier!r}",
                {"operation": "previous", "identifier": identifier},
            )
        return f"{base}{max(earlier)}"

    def _parent_of_branch(self, identifier: str, base: str) -> str:
        """Climb from the start of a branch to the zettel the branch hangs off."""
        if not base:
            raise ExhaustedSiblings(
                f"No zettel before {identifier!r}",
                {"operation": "previous", "identifier": identifier},
            )

        parent, branch_leaf, numeric = strip_leaf(base)
        if numeric:
            raise ConsistencyViolation(
                f"Branch {branch_leaf!r} of {identifier!r} is numeric, cannot resolve parent",
                {"operation": "previous", "identifier": identifier, "branch": base},
            )
        if not parent or not is_sequence(parent):
            # top-level prefix such as "tmp." has no parent zettel
            raise ExhaustedSiblings(
                f"No zettel before {identifier!r}",
                {"operation": "previous", "identifier": identifier},
            )
        if not self.corpus.exists(parent):
            raise NotFound(
                f"Previous file {str(self.corpus.path_for(parent))!r} doesn't exist",
                {"operation": "previous", "identifier": identifier, "parent": parent},
            )
        return parent

    def resolve_prefix(self, prefix: str) -> str:
        """Resolve a bare prefix to its earliest-numbered direct child.

        Children are looked for both dot-separated (``tmp.1``) and
        concatenated (``tmp1``); grandchildren never match.
        """
        candidates: list[tuple[int, int, str]] = []
        for rank, base in enumerate((prefix + ".", prefix)):
            for number, identifier in self._sequences_under(base).items():
                candidates.append((number, rank, identifier))

        if not candidates:
            raise NotFound(
                f"Neither file, nor matching sequence exist: {prefix!r}",
                {"operation": "resolve_prefix", "identifier": prefix},
            )
        return min(candidates)[2]

    def resolve(self, identifier: str) -> str:
        """Resolve whatever a user typed to an existing unit identifier.

        A branch resolves to its first unit; an unknown identifier falls back
        to prefix resolution.
        """
        if not is_sequence(identifier):
            try:
                return self.first_in_branch(identifier)
            except NotFound:
                # may be an all-letter prefix such as "tmp"
                return self.resolve_prefix(identifier)

        if self.corpus.exists(identifier):
            return identifier
        return self.resolve_prefix(identifier)
