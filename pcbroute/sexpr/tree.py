"""Generic S-expression tree with tag-based queries.

A ``Tree`` is an ordered list of elements, each either a scalar value or a
nested ``Tree``. The first element is conventionally the tag naming the
tree's role, e.g. ``(net 1 "GND")`` is a tree tagged ``net``.

Queries are deliberately generic: ``get`` finds every fragment with a given
tag anywhere below a tree, and callers narrow the results themselves.
"""

from typing import Iterator, List, Optional, Union

from .value import Value, render_value, same_value, value_as_string

Element = Union[Value, "Tree"]


class Tree:
    """A node of the S-expression forest.

    Example:
        >>> tree = parse('test (nesting 1 2 3.5) string')
        >>> tree.get("nesting")[0].values()
        [1, 2, 3.5]
    """

    __slots__ = ("elements",)

    def __init__(self, elements: Optional[List[Element]] = None):
        self.elements: List[Element] = list(elements) if elements else []

    @classmethod
    def node(cls, tag: str, *items) -> "Tree":
        """Build a tagged tree, e.g. ``Tree.node("at", 1.0, 2.0)``."""
        return cls([tag, *items])

    # --- Construction ---

    def append_value(self, value: Value):
        self.elements.append(value)

    def append_tree(self, tree: "Tree"):
        self.elements.append(tree)

    def copy(self) -> "Tree":
        """Deep copy (values are immutable, so only nodes are duplicated)."""
        return Tree([e.copy() if isinstance(e, Tree) else e for e in self.elements])

    # --- Queries ---

    def name(self) -> str:
        """Rendered form of the first element, or "" if it is a subtree."""
        if not self.elements or isinstance(self.elements[0], Tree):
            return ""
        return value_as_string(self.elements[0])

    def get(self, tag: str) -> List["Tree"]:
        """Find all fragments tagged ``tag``, at any depth.

        A matching tree is returned with its tag stripped and is not
        searched further. Otherwise every child tree is searched, and the
        results are concatenated depth-first, left to right.
        """
        if self.name() == tag:
            return [Tree(self.elements[1:])]

        found = []
        for child in self.sub_expressions():
            found.extend(child.get(tag))
        return found

    def get_value(self, tag: str) -> Value:
        """First value of the first fragment tagged ``tag``.

        Returns None when nothing matches or the fragment starts with a
        subtree.
        """
        found = self.get(tag)
        if not found or not found[0].elements:
            return None
        first = found[0].elements[0]
        if isinstance(first, Tree):
            return None
        return first

    def values(self) -> List[Value]:
        """Direct value children, in order."""
        return [e for e in self.elements if not isinstance(e, Tree)]

    def sub_expressions(self) -> List["Tree"]:
        """Direct subtree children, in order."""
        return [e for e in self.elements if isinstance(e, Tree)]

    def remove_trivial(self) -> "Tree":
        """Unwrap superfluous nesting such as ``(((a b c)))``."""
        tree = self
        while len(tree.elements) < 2 and tree.elements and isinstance(tree.elements[0], Tree):
            tree = tree.elements[0]
        return tree

    # --- Rendering ---

    def print(self) -> str:
        """Render back to tagged text.

        Values are padded with spaces and subtrees wrapped in parentheses,
        so ``parse(tree.print()) == tree`` for any parsed tree. The tree
        itself is not wrapped.
        """
        parts = []
        for element in self.elements:
            if isinstance(element, Tree):
                parts.append("(" + element.print() + ")")
            else:
                parts.append(" " + render_value(element) + " ")
        return "".join(parts)

    def format(self, indent: str = "  ", _depth: int = 0) -> str:
        """Human-readable multi-line rendering, wrapped in parentheses.

        Trees holding only values stay on one line; other children start
        on a new line at increased indentation.
        """
        pad = indent * _depth
        head = " ".join(render_value(v) for v in self.values_until_subtree())
        rest = self.elements[len(self.values_until_subtree()):]
        if not rest:
            return f"{pad}({head})"

        lines = [f"{pad}({head}"]
        for element in rest:
            if isinstance(element, Tree):
                lines.append(element.format(indent, _depth + 1))
            else:
                lines.append(f"{pad}{indent}{render_value(element)}")
        lines.append(f"{pad})")
        return "\n".join(lines)

    def values_until_subtree(self) -> List[Value]:
        """Leading run of values before the first subtree."""
        head = []
        for element in self.elements:
            if isinstance(element, Tree):
                break
            head.append(element)
        return head

    # --- Dunder helpers ---

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[Element]:
        return iter(self.elements)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Tree):
            return NotImplemented
        if len(self.elements) != len(other.elements):
            return False
        for a, b in zip(self.elements, other.elements):
            if isinstance(a, Tree) or isinstance(b, Tree):
                if not (isinstance(a, Tree) and isinstance(b, Tree) and a == b):
                    return False
            elif not same_value(a, b):
                return False
        return True

    __hash__ = None

    def __repr__(self) -> str:
        return f"Tree({self.elements!r})"
