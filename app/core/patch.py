"""SCIM PATCH engine (RFC 7644 Section 3.5.2, literal-path subset).

Operations apply strictly in request order, so a later operation sees the
effects of every earlier one. Paths are literal top-level attribute names;
an empty path targets the whole resource.

| op      | path set                 | path empty                                    |
|---------|--------------------------|-----------------------------------------------|
| add     | attributes[path] = value | merge mapping; list + list concatenates       |
| replace | attributes[path] = value | merge mapping; every key overwritten          |
| remove  | attributes[path] = None  | attributes[""] = None (pruned away: a no-op)  |

Nulls left by ``remove`` disappear when the tree is next normalized.
"""
from __future__ import annotations
import copy
from typing import Any, Dict, Iterable

from app.core.exceptions import InvalidPatchError
from app.core.resource import Attributes, PatchOperation

PATCH_OP_ADD = "add"
PATCH_OP_REPLACE = "replace"
PATCH_OP_REMOVE = "remove"
SUPPORTED_OPS = (PATCH_OP_ADD, PATCH_OP_REPLACE, PATCH_OP_REMOVE)

PATCH_OP_SCHEMA = "urn:ietf:params:scim:api:messages:2.0:PatchOp"


def _expect_mapping(operation: PatchOperation) -> Dict[str, Any]:
    if not isinstance(operation.value, dict):
        raise InvalidPatchError(
            f"'{operation.op}' without a path requires an object value, "
            f"got {type(operation.value).__name__}"
        )
    return operation.value


def _add(attributes: Attributes, operation: PatchOperation) -> None:
    if operation.path:
        attributes[operation.path] = copy.deepcopy(operation.value)
        return
    for key, value in _expect_mapping(operation).items():
        current = attributes.get(key)
        if isinstance(current, list) and isinstance(value, list):
            attributes[key] = current + copy.deepcopy(value)
        else:
            attributes[key] = copy.deepcopy(value)


def _replace(attributes: Attributes, operation: PatchOperation) -> None:
    if operation.path:
        attributes[operation.path] = copy.deepcopy(operation.value)
        return
    for key, value in _expect_mapping(operation).items():
        attributes[key] = copy.deepcopy(value)


def _remove(attributes: Attributes, operation: PatchOperation) -> None:
    attributes[operation.path] = None


_HANDLERS = {
    PATCH_OP_ADD: _add,
    PATCH_OP_REPLACE: _replace,
    PATCH_OP_REMOVE: _remove,
}


def apply_patch(attributes: Attributes, operations: Iterable[PatchOperation]) -> Attributes:
    """Apply ``operations`` to a copy of ``attributes`` and return the new tree.

    Raises:
        InvalidPatchError: Unknown op, or a path-less add/replace whose value
            is not an object
    """
    patched: Attributes = copy.deepcopy(dict(attributes))
    for operation in operations:
        handler = _HANDLERS.get(operation.op.lower())
        if handler is None:
            raise InvalidPatchError(
                f"Unsupported patch op '{operation.op}'. Expected one of: {', '.join(SUPPORTED_OPS)}"
            )
        handler(patched, operation)
    return patched
