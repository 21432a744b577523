"""
Tree Routes

Create/restore trees, update leaves and serve hash paths.

Handlers are plain functions: FastAPI runs them in its threadpool, and
each one holds the per-tree lock while it touches the tree.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from api.deps import TreeRegistry, get_registry
from api.errors import InvalidRequestError
from api.models.requests import CreateTreeRequest, UpdateLeafRequest, VerifyPathRequest
from api.models.responses import (
    HashPathResponse,
    TreeResponse,
    UpdateResponse,
    VerifyResponse,
)
from core.crypto.hashing import from_hex, to_hex
from core.merkle import HashPath, MerkleTree, check_leaf, leaf_from_text


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trees", tags=["trees"])


def _decode_hex(value: str, field: str) -> bytes:
    try:
        return from_hex(value)
    except ValueError as e:
        raise InvalidRequestError(f"Invalid hex in {field}: {e}", details={"field": field}) from e


def _tree_response(tree: MerkleTree) -> TreeResponse:
    return TreeResponse(
        name=tree.name,
        depth=tree.depth,
        root=to_hex(tree.get_root()),
    )


@router.post("", response_model=TreeResponse)
def create_tree(
    request: CreateTreeRequest,
    registry: TreeRegistry = Depends(get_registry),
) -> TreeResponse:
    """
    Create a tree, or restore it if one with this name already exists.

    An existing tree keeps its stored depth.
    """
    with registry.lock(request.name):
        tree = registry.open(request.name, request.depth)
        return _tree_response(tree)


@router.get("/{name}", response_model=TreeResponse)
def get_tree(
    name: str,
    registry: TreeRegistry = Depends(get_registry),
) -> TreeResponse:
    """Return the current root and depth of a tree."""
    with registry.lock(name):
        return _tree_response(registry.get(name))


@router.put("/{name}/leaves/{index}", response_model=UpdateResponse)
def update_leaf(
    name: str,
    index: int,
    request: UpdateLeafRequest,
    registry: TreeRegistry = Depends(get_registry),
) -> UpdateResponse:
    """
    Set the leaf at ``index`` and return the new root.

    The value must decode to exactly 64 bytes; utf8 text is zero-padded.
    """
    if request.encoding == "utf8":
        value = leaf_from_text(request.value)
    else:
        value = _decode_hex(request.value, "value")

    with registry.lock(name):
        tree = registry.get(name)
        previous = tree.get_root()
        root = tree.update_element(index, value)

    logger.info(f"Tree {name!r}: leaf {index} updated")
    return UpdateResponse(
        name=name,
        index=index,
        root=to_hex(root),
        previous_root=to_hex(previous),
    )


@router.get("/{name}/hash-path/{index}", response_model=HashPathResponse)
def get_hash_path(
    name: str,
    index: int,
    registry: TreeRegistry = Depends(get_registry),
) -> HashPathResponse:
    """Return the (left, right) sibling pairs proving the leaf at ``index``."""
    with registry.lock(name):
        tree = registry.get(name)
        path = tree.get_hash_path(index)
        root = tree.get_root()

    encoded = path.to_dict()
    return HashPathResponse(
        name=name,
        index=index,
        root=to_hex(root),
        depth=encoded["depth"],
        pairs=encoded["pairs"],
    )


@router.post("/{name}/verify", response_model=VerifyResponse)
def verify_hash_path(
    name: str,
    request: VerifyPathRequest,
    registry: TreeRegistry = Depends(get_registry),
) -> VerifyResponse:
    """
    Check a hash path for a leaf value.

    Verifies against ``root`` when given, otherwise the tree's current root.
    """
    value = _decode_hex(request.value, "value")
    path = HashPath.from_dict({"pairs": request.pairs})
    claimed = _decode_hex(request.root, "root") if request.root else None

    with registry.lock(name):
        tree = registry.get(name)
        root = claimed if claimed is not None else tree.get_root()
        if claimed is None:
            valid = tree.verify(request.index, value, path)
        else:
            leaf_hash = tree.hasher.hash(check_leaf(value))
            valid = path.verify(leaf_hash, request.index, root, tree.hasher)

    return VerifyResponse(
        valid=valid,
        index=request.index,
        root=to_hex(root),
    )
