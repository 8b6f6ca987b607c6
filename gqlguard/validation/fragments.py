"""Fragment lookup and cycle guarding shared by the limit rules."""

from contextlib import contextmanager
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

from graphql import DocumentNode, FragmentDefinitionNode


FragmentIndex = Mapping[str, FragmentDefinitionNode]


def build_fragment_index(document: DocumentNode) -> FragmentIndex:
    """
    Collect every fragment definition of a document keyed by name.

    Args:
        document: Parsed GraphQL document

    Returns:
        Read-only mapping from fragment name to its definition
    """
    fragments: Dict[str, FragmentDefinitionNode] = {}
    for definition in document.definitions:
        if isinstance(definition, FragmentDefinitionNode):
            # Duplicates are reported by UniqueFragmentNamesRule
            fragments.setdefault(definition.name.value, definition)
    return MappingProxyType(fragments)


def resolve_fragment(index: FragmentIndex, name: str) -> Optional[FragmentDefinitionNode]:
    """Look up a fragment by name, returning None for unknown fragments."""
    return index.get(name)


class VisitedPath:
    """
    Fragment names currently being expanded on one traversal branch.

    Entering a name that is already on the path is refused instead of
    raising: fragment cycles are reported by NoFragmentCyclesRule.
    """

    def __init__(self):
        self._names: Dict[str, None] = {}

    def enter(self, name: str) -> bool:
        """Push a fragment name; returns False if it is already on the path."""
        if name in self._names:
            return False
        self._names[name] = None
        return True

    def exit(self, name: str) -> None:
        """Pop a fragment name pushed by a successful enter()."""
        del self._names[name]

    @contextmanager
    def visiting(self, name: str) -> Iterator[bool]:
        """
        Scope a fragment expansion.

        Yields True when the fragment was entered. The name is popped again
        on every exit path, early returns and exceptions included.
        """
        entered = self.enter(name)
        try:
            yield entered
        finally:
            if entered:
                self.exit(name)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._names))

    def __repr__(self) -> str:
        return f"VisitedPath({' -> '.join(self._names)})"
