"""
Merkle Tree Engine
Flat-array Merkle tree construction, single and multi-leaf proofs,
proof replay, validation and rendering.

Tree Layout (Hard Contracts):
1. A tree over n leaves is a list of 2n - 1 nodes, root at index 0
2. Children of i are 2i + 1 and 2i + 2; parent of i > 0 is (i - 1) // 2
3. Leaves occupy the last n slots, in reversed input order:
   input leaf k lives at index len(tree) - 1 - k
4. Every node is exactly 32 bytes
5. Internal nodes are node_hash(left, right), with node_hash commutative

Determinism Notes:
- No randomness and no reordering of leaves by content
- Nothing in this module mutates a tree it is given
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Sequence, TypeVar

from core.crypto.hashes import NodeHash, standard_node_hash
from core.crypto.hashing import NODE_SIZE, BytesLike, to_hex
from core.schemas.errors import InvalidArgumentException, invariant, validate_argument

T = TypeVar("T")


@dataclass(frozen=True)
class MultiProof(Generic[T]):
    """
    A proof that several leaves belong to the same tree.

    Attributes:
        leaves: Leaves being proven, in the order the replay consumes them
        proof: Sibling hashes not derivable from leaves or earlier steps
            (raw bytes in the engine, hex strings from the tree wrappers)
        proof_flags: Per step, True when the second operand comes from the
            working queue, False when it comes from proof
    """
    leaves: list[T]
    proof: list[BytesLike] = field(default_factory=list)
    proof_flags: list[bool] = field(default_factory=list)


# =============================================================================
# Index arithmetic
# =============================================================================

def left_child_index(i: int) -> int:
    return 2 * i + 1


def right_child_index(i: int) -> int:
    return 2 * i + 2


def parent_index(i: int) -> int:
    validate_argument(i > 0, "Root has no parent")
    return (i - 1) // 2


def sibling_index(i: int) -> int:
    validate_argument(i > 0, "Root has no siblings")
    return i + 1 if i % 2 == 1 else i - 1


def is_tree_node(tree: Sequence[bytes], i: int) -> bool:
    return 0 <= i < len(tree)


def is_internal_node(tree: Sequence[bytes], i: int) -> bool:
    return is_tree_node(tree, left_child_index(i))


def is_leaf_node(tree: Sequence[bytes], i: int) -> bool:
    return is_tree_node(tree, i) and not is_internal_node(tree, i)


def is_valid_merkle_node(node: object) -> bool:
    return isinstance(node, bytes) and len(node) == NODE_SIZE


def check_leaf_node(tree: Sequence[bytes], i: int) -> None:
    if not is_leaf_node(tree, i):
        raise InvalidArgumentException(
            "Index is not a leaf",
            details={"index": i, "tree_length": len(tree)},
        )


def check_valid_merkle_node(node: object) -> None:
    if not is_valid_merkle_node(node):
        raise InvalidArgumentException(
            f"Merkle tree nodes must be bytes of length {NODE_SIZE}"
        )


# =============================================================================
# Tree Builder
# =============================================================================

def make_merkle_tree(
    leaves: Sequence[bytes],
    node_hash: NodeHash = standard_node_hash,
) -> list[bytes]:
    """
    Build the flat tree array for a sequence of leaf hashes.

    Algorithm:
    1. Allocate 2n - 1 slots
    2. Place leaf k at slot len - 1 - k
    3. Fill internal slots from len - 1 - n down to 0 with the hash
       of their two children

    Args:
        leaves: Leaf hashes (32 bytes each), at least one
        node_hash: Commutative pair hash

    Returns:
        Flat tree array, root at index 0

    Raises:
        InvalidArgumentException: If leaves is empty or a leaf is malformed

    Example:
        >>> tree = make_merkle_tree([bytes(31) + b"\x01", bytes(31) + b"\x02"])
        >>> len(tree)
        3
    """
    for leaf in leaves:
        check_valid_merkle_node(leaf)
    validate_argument(len(leaves) > 0, "Expected non-zero number of leaves")

    tree: list[bytes] = [b""] * (2 * len(leaves) - 1)

    for i, leaf in enumerate(leaves):
        tree[len(tree) - 1 - i] = leaf

    for i in range(len(tree) - 1 - len(leaves), -1, -1):
        tree[i] = node_hash(tree[left_child_index(i)], tree[right_child_index(i)])

    return tree


def build_tree(
    leaves: Sequence[bytes],
    node_hash: NodeHash = standard_node_hash,
) -> tuple[list[bytes], list[int]]:
    """
    Build a tree and the map from input leaf position to tree index.

    Returns:
        (tree, index_map) where index_map[k] == len(tree) - 1 - k
    """
    tree = make_merkle_tree(leaves, node_hash)
    index_map = [len(tree) - 1 - k for k in range(len(leaves))]
    return tree, index_map


# =============================================================================
# Proof Generator
# =============================================================================

def get_proof(tree: Sequence[bytes], index: int) -> list[bytes]:
    """
    Collect the sibling hashes on the path from a leaf to the root.

    Args:
        tree: Flat tree array
        index: Tree index of a leaf

    Returns:
        Sibling hashes, bottom-up, excluding the root

    Raises:
        InvalidArgumentException: If index is not a leaf slot
    """
    check_leaf_node(tree, index)

    proof: list[bytes] = []
    while index > 0:
        proof.append(tree[sibling_index(index)])
        index = parent_index(index)
    return proof


def get_multi_proof(tree: Sequence[bytes], indices: Sequence[int]) -> MultiProof[bytes]:
    """
    Derive a multiproof for several leaves at once.

    Algorithm:
    1. Sort indices descending; this is the working queue
    2. While the head of the queue is not the root, pop it as j:
       - if sibling(j) is the next queued index, it is known: pop it
         too and emit a True flag
       - otherwise emit a False flag and append tree[sibling(j)] to proof
       - queue parent(j)
    3. With no indices at all, the proof is the root itself

    Args:
        tree: Flat tree array
        indices: Distinct tree indices, each a leaf slot

    Returns:
        MultiProof whose leaves are tree[i] in descending index order

    Raises:
        InvalidArgumentException: If an index is not a leaf or is duplicated
    """
    for i in indices:
        check_leaf_node(tree, i)

    sorted_indices = sorted(indices, reverse=True)
    for prev, cur in zip(sorted_indices, sorted_indices[1:]):
        if prev == cur:
            raise InvalidArgumentException(
                "Cannot prove duplicated index",
                details={"index": cur},
            )

    queue = list(sorted_indices)
    head = 0
    proof: list[bytes] = []
    proof_flags: list[bool] = []

    while head < len(queue) and queue[head] > 0:
        j = queue[head]
        head += 1
        s = sibling_index(j)
        p = parent_index(j)

        if head < len(queue) and queue[head] == s:
            proof_flags.append(True)
            head += 1
        else:
            proof_flags.append(False)
            proof.append(tree[s])
        queue.append(p)

    if len(sorted_indices) == 0:
        proof.append(tree[0])

    return MultiProof(
        leaves=[tree[i] for i in sorted_indices],
        proof=proof,
        proof_flags=proof_flags,
    )


# =============================================================================
# Proof Verifier / Replayer
# =============================================================================

def process_proof(
    leaf: bytes,
    proof: Sequence[bytes],
    node_hash: NodeHash = standard_node_hash,
) -> bytes:
    """
    Recompute the root implied by a leaf and its single proof.

    The caller compares the result against a trusted root.
    """
    check_valid_merkle_node(leaf)
    for node in proof:
        check_valid_merkle_node(node)

    computed = leaf
    for sibling in proof:
        computed = node_hash(computed, sibling)
    return computed


def process_multi_proof(
    multiproof: MultiProof[bytes],
    node_hash: NodeHash = standard_node_hash,
) -> bytes:
    """
    Replay a multiproof and return the root it implies.

    The working queue starts as the leaves; every computed hash is
    appended to it. Each step takes its first operand from the working
    queue and its second from the working queue (flag True) or from
    proof (flag False).

    Raises:
        InvalidArgumentException: If a node is malformed
        InvariantViolationException: If flags, leaves and proof cannot
            be replayed together
    """
    leaves = list(multiproof.leaves)
    proof = list(multiproof.proof)
    flags = list(multiproof.proof_flags)

    for node in leaves:
        check_valid_merkle_node(node)
    for node in proof:
        check_valid_merkle_node(node)

    invariant(
        len(flags) == len(leaves) + len(proof) - 1,
        "Provided leaves and multiproof are not compatible",
        leaves=len(leaves),
        proof=len(proof),
        proof_flags=len(flags),
    )
    invariant(
        len(proof) >= flags.count(False),
        "Invalid multiproof format",
    )

    queue: list[bytes] = leaves
    queue_pos = 0
    proof_pos = 0

    for step, flag in enumerate(flags):
        invariant(queue_pos < len(queue), "Multiproof ran out of operands", step=step)
        a = queue[queue_pos]
        queue_pos += 1

        if flag:
            invariant(queue_pos < len(queue), "Multiproof ran out of operands", step=step)
            b = queue[queue_pos]
            queue_pos += 1
        else:
            invariant(proof_pos < len(proof), "Multiproof ran out of proof items", step=step)
            b = proof[proof_pos]
            proof_pos += 1

        queue.append(node_hash(a, b))

    remaining = (len(queue) - queue_pos) + (len(proof) - proof_pos)
    invariant(remaining == 1, "Multiproof did not reduce to a single root", remaining=remaining)

    if queue_pos < len(queue):
        return queue[-1]
    return proof[proof_pos]


# =============================================================================
# Validator
# =============================================================================

def is_valid_merkle_tree(
    tree: Sequence[bytes],
    node_hash: NodeHash = standard_node_hash,
) -> bool:
    """
    Check that a tree array is self-consistent. Never raises.

    A tree is valid when it is non-empty, every node is 32 bytes, every
    node has zero or two children, and every internal node equals the
    hash of its children. Even-length arrays always fail the child rule.
    """
    if not all(is_valid_merkle_node(node) for node in tree):
        return False

    for i, node in enumerate(tree):
        left = left_child_index(i)
        right = right_child_index(i)

        if right >= len(tree):
            if left < len(tree):
                return False
            continue

        try:
            expected = node_hash(tree[left], tree[right])
        except InvalidArgumentException:
            # children outside the hash's domain, e.g. not field elements
            return False
        if node != expected:
            return False

    return len(tree) > 0


# =============================================================================
# Renderer
# =============================================================================

def render_merkle_tree(tree: Sequence[bytes]) -> str:
    """
    Render a tree array as an indented text dump for debugging.

    Example (three nodes):
        0) 0x...
        ├─ 1) 0x...
        └─ 2) 0x...

    Raises:
        InvalidArgumentException: If tree is empty
    """
    validate_argument(len(tree) > 0, "Expected non-zero number of nodes")

    # path entries: 1 = more siblings follow, 0 = last child
    stack: list[tuple[int, list[int]]] = [(0, [])]
    lines: list[str] = []

    while stack:
        i, path = stack.pop()
        prefix = "".join("│  " if p else "   " for p in path[:-1])
        connector = "".join("├─ " if p else "└─ " for p in path[-1:])
        lines.append(f"{prefix}{connector}{i}) {to_hex(tree[i])}")

        if right_child_index(i) < len(tree):
            stack.append((right_child_index(i), path + [0]))
            stack.append((left_child_index(i), path + [1]))

    return "\n".join(lines)


__all__ = [
    "MultiProof",
    "left_child_index",
    "right_child_index",
    "parent_index",
    "sibling_index",
    "is_leaf_node",
    "is_valid_merkle_node",
    "make_merkle_tree",
    "build_tree",
    "get_proof",
    "get_multi_proof",
    "process_proof",
    "process_multi_proof",
    "is_valid_merkle_tree",
    "render_merkle_tree",
]
