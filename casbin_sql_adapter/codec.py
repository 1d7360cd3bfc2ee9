"""
Conversion between policy table rows and the in-memory policy model.

The model is owned by the policy engine. It is indexed as
``model[section][rule_type].policy`` where ``policy`` is a list of rules and
each rule is a list of strings. The section of a rule type is its first
character, so ``p`` and ``p2`` both live in section ``p``.
"""

import logging
from typing import Any, Iterable, Iterator, Optional, Sequence

from casbin_sql_adapter.exceptions import PolicyValidationError
from casbin_sql_adapter.models.policy import (
    FIELD_COLUMNS,
    FIELD_LENGTH,
    MAX_FIELDS,
    PTYPE_LENGTH,
)

logger = logging.getLogger(__name__)


SEPARATOR = ", "
SAVE_SECTIONS = ("p", "g")


def _get_assertion(model: Any, sec: str, ptype: str) -> Optional[Any]:
    """Return the assertion for a rule type, or None if the model lacks it."""
    try:
        assertions = model[sec]
    except KeyError:
        return None
    if not assertions:
        return None
    return assertions.get(ptype)


def add_rule_to_model(model: Any, ptype: str, rule: list[str]) -> bool:
    """Append a rule under its rule type. Returns False if the type is undeclared."""
    if not ptype:
        logger.warning(f"Skipping rule without a rule type: {rule}")
        return False

    sec = ptype[:1]
    assertion = _get_assertion(model, sec, ptype)
    if assertion is None:
        logger.warning(f"Skipping rule of undeclared type {ptype!r}: {rule}")
        return False

    assertion.policy.append(rule)
    return True


def load_policy_line(line: str, model: Any) -> None:
    """Parse a ``ptype, v0, v1, ...`` line and append it to the model.

    Empty lines are ignored. Fields are not trimmed or unquoted.
    """
    if line == "":
        return

    tokens = line.split(SEPARATOR)
    add_rule_to_model(model, tokens[0], tokens[1:])


def row_to_rule(row: Any) -> list[str]:
    """Decode the fields of a row. NULL columns are absent, not empty."""
    rule = []
    for name in FIELD_COLUMNS:
        value = getattr(row, name)
        if value is not None:
            rule.append(value)
    return rule


def row_to_line(row: Any) -> str:
    """Render a row as a policy line, omitting NULL columns."""
    return SEPARATOR.join([row.ptype, *row_to_rule(row)])


def load_policy_row(row: Any, model: Any) -> bool:
    """Append a row to the model without going through the line format."""
    return add_rule_to_model(model, row.ptype, row_to_rule(row))


def validate_rule(ptype: str, rule: Sequence[str]) -> None:
    """Reject rules that do not fit the fixed-width table or the line format."""
    if not isinstance(ptype, str) or not ptype:
        raise PolicyValidationError(f"invalid rule type: {ptype!r}")
    if len(ptype) > PTYPE_LENGTH:
        raise PolicyValidationError(
            f"rule type {ptype!r} is longer than {PTYPE_LENGTH} characters"
        )
    if SEPARATOR in ptype:
        raise PolicyValidationError(f"rule type {ptype!r} contains {SEPARATOR!r}")

    if len(rule) > MAX_FIELDS:
        raise PolicyValidationError(
            f"rule of type {ptype!r} has {len(rule)} fields, at most {MAX_FIELDS} are supported"
        )

    for index, value in enumerate(rule):
        if not isinstance(value, str):
            raise PolicyValidationError(f"field v{index} of {ptype!r} is not a string: {value!r}")
        if len(value) > FIELD_LENGTH:
            raise PolicyValidationError(
                f"field v{index} of {ptype!r} is longer than {FIELD_LENGTH} characters"
            )
        if SEPARATOR in value:
            raise PolicyValidationError(
                f"field v{index} of {ptype!r} contains the separator {SEPARATOR!r}: {value!r}"
            )


def rule_to_params(ptype: str, rule: Sequence[str]) -> dict[str, Optional[str]]:
    """Encode a rule as insert parameters: ptype, then v0..v5 with NULL padding."""
    validate_rule(ptype, rule)

    params: dict[str, Optional[str]] = {"ptype": ptype}
    for index, name in enumerate(FIELD_COLUMNS):
        params[name] = rule[index] if index < len(rule) else None
    return params


def iter_model_rules(
    model: Any,
    sections: Iterable[str] = SAVE_SECTIONS,
) -> Iterator[tuple[str, list[str]]]:
    """Yield ``(ptype, rule)`` for every rule in the given sections, in order."""
    for sec in sections:
        try:
            assertions = model[sec]
        except KeyError:
            continue
        if not assertions:
            continue

        for ptype, assertion in assertions.items():
            for rule in assertion.policy:
                yield ptype, rule
