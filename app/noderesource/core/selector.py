"""Node selector matching.

A rule applies to this node when its (operator, key, value) triple matches
the node's labels.
"""

import logging
from collections.abc import Mapping

from noderesource.models.rule import Selector, SelectorOperator

logger = logging.getLogger(__name__)


def matches(operator: str, key: str, value: str, node_labels: Mapping[str, str]) -> bool:
    """Evaluate a label selector against the node's labels.

    Args:
        operator: One of In, NotIn, Exists, DoesNotExist.
        key: Label key.
        value: Label value; ignored by Exists and DoesNotExist.
        node_labels: Labels of this node.

    Returns:
        True if the selector matches. An unknown operator never matches.
    """
    try:
        op = SelectorOperator(operator)
    except ValueError:
        logger.error("Unknown selector operator %r for key %r, rule skipped", operator, key)
        return False

    match op:
        case SelectorOperator.IN:
            return key in node_labels and node_labels[key] == value
        case SelectorOperator.NOT_IN:
            return not (key in node_labels and node_labels[key] == value)
        case SelectorOperator.EXISTS:
            return key in node_labels
        case SelectorOperator.DOES_NOT_EXIST:
            return key not in node_labels


def selector_matches(selector: Selector, node_labels: Mapping[str, str]) -> bool:
    """Evaluate a rule's Selector against the node's labels."""
    return matches(selector.operator, selector.key, selector.value, node_labels)
