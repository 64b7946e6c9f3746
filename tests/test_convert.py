import pytest

from gmailctl.convert import (
    from_rule,
    from_rules,
    from_rules_with_limit,
    generate_criteria,
)
from gmailctl.criteria import Actions as RuleActions
from gmailctl.criteria import FunctionType, Leaf, Node, OperationType, Rule
from gmailctl.filter import Actions, Criteria, Filter, Filters
from gmailctl.gmail import Category


def test_quotes():
    rules = [
        Rule(
            criteria=Leaf(
                FunctionType.FROM,
                OperationType.OR,
                ["a", "with spaces", "with+plus", "foo+bar@example.com"],
            ),
            actions=RuleActions(archive=True),
        )
    ]
    expected = Filters(
        [
            Filter(
                criteria=Criteria(
                    from_='{a "with spaces" "with+plus" foo+bar@example.com}'
                ),
                action=Actions(archive=True),
            )
        ]
    )
    assert from_rules(rules) == expected


def test_and_node():
    rules = [
        Rule(
            criteria=Node(
                OperationType.AND,
                [
                    Leaf(FunctionType.FROM, args=["a"]),
                    Leaf(FunctionType.TO, OperationType.AND, ["a", "b", "c"]),
                ],
            ),
            actions=RuleActions(delete=True, category=Category.FORUMS),
        )
    ]
    expected = [
        Filter(
            criteria=Criteria(from_="a", to="(a b c)"),
            action=Actions(delete=True, category=Category.FORUMS),
        )
    ]
    assert from_rules(rules) == expected


def test_not_or():
    rules = [
        Rule(
            criteria=Node(
                OperationType.NOT,
                [
                    Node(
                        OperationType.OR,
                        [
                            Leaf(FunctionType.TO, OperationType.OR, ["a", "b"]),
                            Leaf(FunctionType.CC, OperationType.AND, ["c", "d"]),
                        ],
                    )
                ],
            ),
            actions=RuleActions(mark_read=True),
        )
    ]
    expected = [
        Filter(
            criteria=Criteria(query="-{to:{a b} cc:(c d)}"),
            action=Actions(mark_read=True),
        )
    ]
    assert from_rules(rules) == expected


def test_quoting():
    rules = [
        Rule(
            criteria=Node(
                OperationType.AND,
                [
                    Leaf(FunctionType.HAS, OperationType.AND, ["foo", "this is quoted"]),
                    Leaf(FunctionType.QUERY, args=["from:foo has:spreadsheet"]),
                ],
            ),
            actions=RuleActions(mark_important=True),
        )
    ]
    expected = [
        Filter(
            criteria=Criteria(query='(foo "this is quoted") from:foo has:spreadsheet'),
            action=Actions(mark_important=True),
        )
    ]
    assert from_rules(rules) == expected


def test_split_leaf():
    rule = Rule(
        criteria=Leaf(FunctionType.FROM, OperationType.OR, ["a", "b", "c"]),
        actions=RuleActions(archive=True),
    )
    expected = [
        Filter(criteria=Criteria(from_="{a b}"), action=Actions(archive=True)),
        Filter(criteria=Criteria(from_="c"), action=Actions(archive=True)),
    ]
    assert from_rule(rule, 2) == expected


def test_split_fail():
    rule = Rule(
        criteria=Node(
            OperationType.AND,
            [
                Leaf(FunctionType.FROM, OperationType.AND, ["d", "e"]),
                Leaf(FunctionType.LIST, OperationType.AND, ["a", "b"]),
                Node(OperationType.NOT, [Leaf(FunctionType.TO, args=["e"])]),
            ],
        ),
        actions=RuleActions(archive=True),
    )
    expected = [
        Filter(
            criteria=Criteria(from_="(d e)", query="list:(a b) -to:e"),
            action=Actions(archive=True),
        )
    ]
    assert from_rule(rule, 3) == expected


def test_split_complex():
    rule = Rule(
        criteria=Node(
            OperationType.AND,
            [
                Leaf(FunctionType.FROM, OperationType.OR, ["d", "e"]),
                Leaf(FunctionType.LIST, OperationType.OR, ["a", "b", "c"]),
                Node(OperationType.NOT, [Leaf(FunctionType.TO, args=["e"])]),
            ],
        ),
        actions=RuleActions(archive=True),
    )
    expected = [
        Filter(
            criteria=Criteria(from_="{d e}", query="list:{a b} -to:e"),
            action=Actions(archive=True),
        ),
        Filter(
            criteria=Criteria(from_="{d e}", query="list:c -to:e"),
            action=Actions(archive=True),
        ),
    ]
    assert from_rule(rule, 7) == expected


def test_split_actions():
    rules = [
        Rule(
            criteria=Leaf(FunctionType.FROM, args=["a"]),
            actions=RuleActions(archive=True, mark_read=True, labels=["l1", "l2", "l3"]),
        )
    ]
    expected = [
        Filter(
            criteria=Criteria(from_="a"),
            action=Actions(archive=True, mark_read=True, add_label="l1"),
        ),
        Filter(criteria=Criteria(from_="a"), action=Actions(add_label="l2")),
        Filter(criteria=Criteria(from_="a"), action=Actions(add_label="l3")),
    ]
    assert from_rules(rules) == expected


def test_actions():
    rules = [
        Rule(
            criteria=Leaf(FunctionType.FROM, args=["a"]),
            actions=RuleActions(
                archive=True,
                delete=True,
                mark_read=True,
                star=True,
                mark_spam=False,
                mark_important=True,
                category=Category.FORUMS,
                forward="bar@example.com",
            ),
        )
    ]
    expected = [
        Filter(
            criteria=Criteria(from_="a"),
            action=Actions(
                archive=True,
                delete=True,
                mark_read=True,
                star=True,
                mark_not_spam=True,
                mark_important=True,
                category=Category.FORUMS,
                forward="bar@example.com",
            ),
        )
    ]
    assert from_rules(rules) == expected


def test_mark_not_important():
    rule = Rule(
        criteria=Leaf(FunctionType.FROM, args=["a"]),
        actions=RuleActions(mark_important=False),
    )
    [got] = from_rule(rule, 20)
    assert got.action == Actions(mark_not_important=True)


def test_mark_spam_is_rejected():
    rule = Rule(
        criteria=Leaf(FunctionType.FROM, args=["a"]),
        actions=RuleActions(mark_spam=True),
    )
    with pytest.raises(ValueError, match="spam directly"):
        from_rules([rule])


def test_error_names_rule_index():
    good = Rule(criteria=Leaf(FunctionType.FROM, args=["a"]), actions=RuleActions(archive=True))
    bad = Rule(
        criteria=Node(
            OperationType.NOT,
            [Leaf(FunctionType.TO, args=["a"]), Leaf(FunctionType.TO, args=["b"])],
        ),
        actions=RuleActions(archive=True),
    )
    with pytest.raises(ValueError, match=r"generating rule #1: generating criteria"):
        from_rules([good, bad])


def test_leaf_without_grouping_and_many_args_is_rejected():
    with pytest.raises(ValueError, match="unknown node operation 0"):
        generate_criteria(Leaf(FunctionType.FROM, OperationType.NONE, ["a", "b"]))


def test_root_or_is_split_into_rules():
    rule = Rule(
        criteria=Node(
            OperationType.OR,
            [Leaf(FunctionType.FROM, args=["a"]), Leaf(FunctionType.TO, args=["b"])],
        ),
        actions=RuleActions(archive=True),
    )
    got = from_rules([rule])
    assert [f.criteria for f in got] == [Criteria(from_="a"), Criteria(to="b")]


def test_default_limit_splits_big_or():
    args = [f"user{i}" for i in range(25)]
    rule = Rule(
        criteria=Leaf(FunctionType.FROM, OperationType.OR, args),
        actions=RuleActions(archive=True),
    )
    got = from_rules([rule])
    assert len(got) == 2
    assert got[1].criteria.from_ == "{" + " ".join(args[20:]) + "}"
    assert from_rules_with_limit([rule], 100) == [
        Filter(criteria=Criteria(from_="{" + " ".join(args) + "}"), action=Actions(archive=True))
    ]


def test_raw_leaf_is_not_quoted():
    crit = Leaf(FunctionType.SUBJECT, args=['"re: hello"'], is_raw=True)
    assert generate_criteria(crit) == Criteria(subject='"re: hello"')


def test_other_functions_go_to_query():
    crit = Node(
        OperationType.AND,
        [
            Leaf(FunctionType.BCC, args=["x"]),
            Leaf(FunctionType.REPLY_TO, args=["y"]),
        ],
    )
    assert generate_criteria(crit) == Criteria(query="bcc:x replyto:y")