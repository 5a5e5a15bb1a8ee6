"""Core API for plan edit operations.

This module provides the dictionary-driven interface used by the command
line and by scripted edits: ``{"op": "add_wall", "p1": [0, 0], ...}``.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Dict, List

from ..core.model import FloorPlan
from .ops import get_operation
from .validators import InvalidOperation, validate_plan

LOGGER = logging.getLogger(__name__)


def apply(plan: FloorPlan, operation: Dict[str, Any]) -> Any:
    """Apply one operation to a plan in place.

    Args:
        plan: The plan to modify.
        operation: Mapping with an ``op`` (or ``type``) field naming the
            operation, plus its parameters.

    Returns:
        The record created, changed or removed by the operation.

    Raises:
        ValueError: If the operation type is missing or not recognized.
        InvalidOperation: If the operation violates plan invariants.
    """
    operation_type = operation.get("op") or operation.get("type")

    if operation_type is None:
        raise ValueError("Operation must have an 'op' or 'type' field")

    try:
        op = get_operation(operation_type)
    except KeyError:
        raise ValueError(f"Unknown operation type: {operation_type}") from None

    params = {k: v for k, v in operation.items() if k not in ["op", "type"]}

    try:
        inspect.signature(op.precheck).bind(plan, **params)
        inspect.signature(op.apply).bind(plan, **params)
    except TypeError as e:
        # Missing or unexpected parameters
        raise InvalidOperation(f"Bad parameters for '{operation_type}': {e}") from e

    op.precheck(plan, **params)
    result = op.apply(plan, **params)

    LOGGER.debug("Applied %s %s", operation_type, params)
    return result


def apply_operations(plan: FloorPlan, operations: List[Dict[str, Any]], stop_on_error: bool = True) -> List[Dict[str, Any]]:
    """Apply a sequence of operations.

    Args:
        plan: The plan to modify in place.
        operations: Operation mappings, applied in order.
        stop_on_error: Re-raise the first failure instead of recording it.

    Returns:
        One result entry per operation with ``success`` and either
        ``result`` or ``error``.
    """
    results = []
    for index, operation in enumerate(operations):
        try:
            result = apply(plan, operation)
            results.append({"operation_index": index, "success": True, "result": result})
        except (ValueError, InvalidOperation) as e:
            if stop_on_error:
                raise
            LOGGER.warning("Operation %d failed: %s", index, e)
            results.append({"operation_index": index, "success": False, "error": str(e)})

    validate_plan(plan)
    return results
