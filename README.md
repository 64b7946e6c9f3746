# gmailctl

A library for managing Gmail filters and labels declaratively.

Rules describe which messages to match (from, to, cc, bcc, reply-to,
subject, list, has, free-form queries, combined with and/or/not) and what to
do with them (archive, delete, label, mark as read or important, star,
categorize, forward). The package simplifies those rules, turns them into
the flat filters Gmail understands, compares them with the filters already
in place, and exports them.

## Modules

- `gmailctl.criteria`: the criteria syntax tree (`Node`, `Leaf`,
  `OperationType`, `FunctionType`, `Visitor`), rule `Actions` and `Rule`.
  `simplify_criteria` flattens nested operations of the same kind, groups
  repeated functions, removes double negations and single-child operators,
  and sorts the tree; `sort_tree` sorts a tree in place.
- `gmailctl.convert`: `from_rules`, `from_rules_with_limit`, `from_rule` and
  `generate_criteria` turn rules into Gmail filters. Arguments with spaces,
  tabs, braces or parentheses are quoted, as is a `+` outside full e-mail
  addresses. A top-level OR becomes one filter per child, filters bigger
  than the size limit (20 by default) are split, and every extra label gets
  a filter of its own. Asking to send mail to spam raises `ValueError`.
- `gmailctl.filter`: `Filters`, `Filter`, `Criteria` and `Actions`, with a
  readable text form (queries are spread over indented lines by `indent`),
  `has_label`, `empty` and `Criteria.to_gmail_search()`.
- `gmailctl.filter_diff`: `diff` and `new_minimal_filters_diff` build a
  `FiltersDiff` of added and removed filters, ignoring IDs and duplicates.
  Similar added and removed filters are paired with the Hungarian algorithm
  so that `str(diff)` gives a readable unified diff.
- `gmailctl.munkres`: `Munkres`, a solver for rectangular assignment
  problems minimising total cost (`links` and `cost` after `run()`).
- `gmailctl.label`: `Labels`, `Label`, `Color`; `Labels.validate()` rejects
  unnamed, duplicate and slash-delimited names. `diff` gives a `LabelsDiff`
  of added, removed and modified labels; `equivalent` compares two labels
  ignoring IDs; `validate` refuses removing labels still used by filters.
- `gmailctl.api`: `export` and `import_filters` convert between filters and
  Gmail API objects (`GmailFilter`, `FilterAction`, `FilterCriteria`,
  `GmailLabel`, `GmailLabelColor`), with `LabelMap` mapping label names to
  IDs. When some filters cannot be imported, `import_filters` raises
  `FilterImportError`, which keeps the valid ones in `filters`.
- `gmailctl.xml_export`: `Exporter` (with an optional `now` callable) and
  `default_exporter()` write filters in the Gmail XML import format.
- `gmailctl.jsonnet`: `marshal_jsonnet` writes a value as Jsonnet-looking
  indented JSON with simple keys unquoted.
- `gmailctl.fakegmail`: `FakeGmail`, a thread-safe in-memory stand-in for
  the Gmail labels and filters service, raising `StatusError` with an HTTP
  status code as Gmail would.
- `gmailctl.gmail`: the `Category` enumeration and
  `possible_category_values()`.
- `gmailctl.reporting`: `prettify`, readable JSON for error reports.
- `gmailctl.errors`: error helpers `with_cause`, `with_details`, `details`,
  `combine`, `errors` and `is_error`.

## Example

```python
from gmailctl.criteria import Actions, FunctionType, Leaf, OperationType, Rule
from gmailctl.convert import from_rules

rule = Rule(
    criteria=Leaf(
        function=FunctionType.FROM,
        grouping=OperationType.OR,
        args=["alice@example.com", "bob@example.com"],
    ),
    actions=Actions(archive=True, labels=["friends"]),
)
filters = from_rules([rule])
print(filters)
```

## What it does not do

- It has no command line: everything is used from Python.
- It does not read configuration files; rules are built as `Rule` objects.
- It does not talk to Gmail. `gmailctl.api` only converts to and from API
  objects, and `FakeGmail` keeps everything in memory.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```