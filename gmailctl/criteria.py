"""Abstract syntax tree of filter criteria, its simplification and rules."""

from __future__ import annotations

import abc
import enum
from dataclasses import dataclass, field
from typing import Union

from gmailctl.gmail import Category

_MAX_SIMPLIFY_PASSES = 4


class OperationType(enum.IntEnum):
    """Logical operator combining criteria."""

    NONE = 0
    AND = 1
    OR = 2
    NOT = 3

    def __str__(self) -> str:
        return _OPERATION_NAMES.get(self, "<unknown>")

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


_OPERATION_NAMES = {
    OperationType.NONE: "<none>",
    OperationType.AND: "and",
    OperationType.OR: "or",
}


class FunctionType(enum.IntEnum):
    """Kind of match performed by a leaf."""

    NONE = 0
    FROM = 1
    TO = 2
    CC = 3
    BCC = 4
    REPLY_TO = 5
    SUBJECT = 6
    LIST = 7
    HAS = 8
    QUERY = 9

    def __str__(self) -> str:
        return _FUNCTION_NAMES.get(self, "<unknown>")

    def __format__(self, spec: str) -> str:
        return format(str(self), spec)


_FUNCTION_NAMES = {
    FunctionType.NONE: "<none>",
    FunctionType.FROM: "from",
    FunctionType.TO: "to",
    FunctionType.CC: "cc",
    FunctionType.BCC: "bcc",
    FunctionType.REPLY_TO: "replyto",
    FunctionType.SUBJECT: "subject",
    FunctionType.LIST: "list",
    FunctionType.HAS: "has",
    FunctionType.QUERY: "query",
}


class Visitor(abc.ABC):
    """Visitor over criteria trees."""

    @abc.abstractmethod
    def visit_node(self, n: Node) -> None:
        """Visit an operator node."""

    @abc.abstractmethod
    def visit_leaf(self, n: Leaf) -> None:
        """Visit a leaf."""


@dataclass
class Node:
    """A logical operator with child criteria."""

    operation: OperationType
    children: list[CriteriaAST] = field(default_factory=list)

    def root_operation(self) -> OperationType:
        return self.operation

    def root_function(self) -> FunctionType:
        return FunctionType.NONE

    def is_leaf(self) -> bool:
        return False

    def accept_visitor(self, v: Visitor) -> None:
        v.visit_node(self)

    def clone(self) -> Node:
        """Return a deep copy of the tree."""
        return Node(self.operation, [c.clone() for c in self.children])


@dataclass
class Leaf:
    """A function applied to arguments, grouped by a logical operator."""

    function: FunctionType
    grouping: OperationType = OperationType.NONE
    args: list[str] = field(default_factory=list)
    is_raw: bool = False

    def root_operation(self) -> OperationType:
        return self.grouping

    def root_function(self) -> FunctionType:
        return self.function

    def is_leaf(self) -> bool:
        return True

    def accept_visitor(self, v: Visitor) -> None:
        v.visit_leaf(self)

    def clone(self) -> Leaf:
        """Return a copy of the leaf."""
        return Leaf(self.function, self.grouping, list(self.args), self.is_raw)


CriteriaAST = Union[Node, Leaf]


@dataclass
class Actions:
    """Actions to apply to the matching emails."""

    labels: list[str] = field(default_factory=list)
    archive: bool = False
    delete: bool = False
    mark_read: bool = False
    star: bool = False
    mark_spam: bool | None = None
    mark_important: bool | None = None
    category: Category | None = None
    forward: str = ""

    def empty(self) -> bool:
        """Tell whether no action is set."""
        return self == Actions()


@dataclass
class Rule:
    """Intermediate representation of a Gmail filter."""

    criteria: CriteriaAST
    actions: Actions = field(default_factory=Actions)


def simplify_criteria(tree: CriteriaAST) -> CriteriaAST:
    """Apply simplifications to a criteria tree and sort it deterministically."""
    res = _simplify(tree)
    sort_tree(res)
    return res


def _simplify(tree: CriteriaAST) -> CriteriaAST:
    changes = 1
    passes = 0
    while changes > 0 and passes < _MAX_SIMPLIFY_PASSES:
        changes = _logical_grouping(tree)
        changes += _functions_grouping(tree)
        tree, removed = _remove_redundancy(tree)
        changes += removed
        passes += 1
    return tree


def _logical_grouping(tree: CriteriaAST) -> int:
    if not isinstance(tree, Node):
        return 0
    count = sum(_logical_grouping(child) for child in tree.children)
    if tree.operation == OperationType.NOT:
        return count

    new_children: list[CriteriaAST] = []
    for child in tree.children:
        if isinstance(child, Node) and child.operation == tree.operation:
            new_children.extend(child.children)
            count += 1
        else:
            new_children.append(child)
    tree.children = new_children
    return count


def _functions_grouping(tree: CriteriaAST) -> int:
    if not isinstance(tree, Node):
        return 0
    count = sum(_functions_grouping(child) for child in tree.children)
    if len(tree.children) <= 1:
        return count

    new_children: list[CriteriaAST] = []
    functions: dict[FunctionType, list[str]] = {}
    raw: set[FunctionType] = set()
    for child in tree.children:
        if not isinstance(child, Leaf) or (
            len(child.args) > 1 and child.grouping != tree.operation
        ):
            new_children.append(child)
            continue
        functions.setdefault(child.function, []).extend(child.args)
        if child.is_raw:
            raw.add(child.function)

    for function, args in functions.items():
        new_children.append(Leaf(function, tree.operation, args, function in raw))
        count += 1
    tree.children = new_children
    return count


def _remove_redundancy(tree: CriteriaAST) -> tuple[CriteriaAST, int]:
    if not isinstance(tree, Node):
        return tree, 0
    count = 0
    new_children: list[CriteriaAST] = []
    for child in tree.children:
        new_child, c = _remove_redundancy(child)
        count += c
        new_children.append(new_child)
    tree.children = new_children

    if tree.operation == OperationType.NOT:
        new_root, c = _simplify_not(tree)
        return new_root, count + c
    if len(tree.children) != 1:
        return tree, count
    return tree.children[0], count + 1


def _simplify_not(root: Node) -> tuple[CriteriaAST, int]:
    if len(root.children) != 1:
        return root, 0
    child = root.children[0]
    if not isinstance(child, Node) or child.operation != OperationType.NOT:
        return root, 0
    if len(child.children) != 1:
        return root, 0
    return child.children[0], 1


def _sort_key(n: CriteriaAST) -> tuple[bool, int, int]:
    return (not n.is_leaf(), n.root_operation(), n.root_function())


def sort_tree(tree: CriteriaAST) -> None:
    """Sort the children of every node: leaves first, then by operation and function."""
    if isinstance(tree, Node):
        for child in tree.children:
            sort_tree(child)
        tree.children.sort(key=_sort_key)