"""
Merkle Tree Wrapper Tests
Tests for core/merkle/standard_tree.py and the standard-v1 dump format.

Covers:
1. Building from typed values and value lookup
2. Proofs by value and by value index
3. Static verification against a trusted root
4. Dump/load round trip and load-time validation
"""
import json

import pytest

from core.crypto.hashes import POSEIDON_HASHER, standard_node_hash
from core.crypto.hashing import to_hex
from core.merkle import MerkleTree, StandardMerkleTree
from core.schemas.errors import InvalidArgumentException
from core.schemas.tree_data import StandardMerkleTreeData
from core.schemas.versioning import STANDARD_FORMAT

from fixtures import ENCODING, make_leaf, make_standard_tree, make_values


@pytest.fixture
def standard_tree():
    return make_standard_tree(5)


@pytest.fixture
def dump_dict(standard_tree):
    """The dump as plain JSON-shaped data, camelCase keys."""
    return json.loads(standard_tree.dump().to_json())


class TestBuild:
    """Tests for StandardMerkleTree.of and accessors."""

    def test_value_order_preserved(self, standard_tree, values):
        assert len(standard_tree) == 5
        assert [value for _, value in standard_tree] == values
        assert standard_tree.at(0) == values[0]
        assert standard_tree.at(5) is None

    def test_leaf_at_reversed_slot(self, standard_tree, values):
        tree = standard_tree.tree
        assert len(tree) == 9
        assert standard_tree.leaf_hash(values[0]) == to_hex(tree[8])
        assert standard_tree.leaf_hash(values[4]) == to_hex(tree[4])

    def test_root_is_hex(self, standard_tree):
        assert standard_tree.root == to_hex(standard_tree.tree[0])
        assert len(standard_tree.root) == 2 + 64

    def test_tree_property_is_a_copy(self, standard_tree):
        standard_tree.tree[0] = bytes(32)
        assert standard_tree.root != to_hex(bytes(32))

    def test_leaf_encoding(self, standard_tree):
        assert standard_tree.leaf_encoding == list(ENCODING)

    def test_empty_values_rejected(self):
        with pytest.raises(InvalidArgumentException, match="Expected non-zero number of leaves"):
            StandardMerkleTree.of([], list(ENCODING))

    def test_unknown_encoding_rejected(self, values):
        with pytest.raises(InvalidArgumentException, match="Unknown type 'address'"):
            StandardMerkleTree.of(values, ["address", "u256"])

    def test_out_of_range_value_rejected(self):
        with pytest.raises(InvalidArgumentException, match="Value is negative for type u256"):
            StandardMerkleTree.of([[1, -1]], list(ENCODING))

    def test_leaf_lookup(self, standard_tree, values):
        assert standard_tree.leaf_lookup(values[2]) == 2

    def test_leaf_lookup_missing(self, standard_tree):
        with pytest.raises(InvalidArgumentException, match="Leaf is not in tree"):
            standard_tree.leaf_lookup([0x9999, 1])

    def test_render(self, standard_tree):
        lines = standard_tree.render().splitlines()
        assert len(lines) == 9
        assert lines[0] == f"0) {standard_tree.root}"

    def test_fresh_tree_validates(self, standard_tree):
        standard_tree.validate()


class TestProofs:
    """Tests for get_proof / get_multi_proof / verify."""

    def test_proof_by_index_and_by_value_agree(self, standard_tree, values):
        assert standard_tree.get_proof(1) == standard_tree.get_proof(values[1])

    def test_every_value_verifies(self, standard_tree, values):
        for i, value in enumerate(values):
            proof = standard_tree.get_proof(i)
            assert standard_tree.verify(i, proof)
            assert standard_tree.verify(value, proof)

    def test_proof_is_hex(self, standard_tree):
        for node in standard_tree.get_proof(0):
            assert node.startswith("0x") and len(node) == 66

    def test_wrong_value_does_not_verify(self, standard_tree, values):
        proof = standard_tree.get_proof(0)
        assert not standard_tree.verify(values[1], proof)

    def test_index_out_of_bounds(self, standard_tree):
        with pytest.raises(InvalidArgumentException, match="Index out of bounds"):
            standard_tree.get_proof(5)
        with pytest.raises(InvalidArgumentException, match="Index out of bounds"):
            standard_tree.verify(-1, [])

    def test_single_value_tree(self):
        tree = StandardMerkleTree.of([[1, 2]], list(ENCODING))

        assert tree.get_proof(0) == []
        assert tree.verify(0, [])

    def test_multiproof_returns_values(self, standard_tree, values):
        multiproof = standard_tree.get_multi_proof([2, 0])

        # replay order: value 0 sits at the highest tree index
        assert multiproof.leaves == [values[0], values[2]]
        assert all(node.startswith("0x") for node in multiproof.proof)
        assert standard_tree.verify_multi_proof(multiproof)

    def test_multiproof_by_values_and_indices(self, standard_tree, values):
        multiproof = standard_tree.get_multi_proof([values[3], 1])

        assert sorted(map(tuple, multiproof.leaves)) == sorted([tuple(values[1]), tuple(values[3])])
        assert standard_tree.verify_multi_proof(multiproof)

    def test_multiproof_all_values(self, standard_tree):
        multiproof = standard_tree.get_multi_proof(list(range(5)))

        assert multiproof.proof == []
        assert standard_tree.verify_multi_proof(multiproof)

    def test_multiproof_duplicate_rejected(self, standard_tree):
        with pytest.raises(InvalidArgumentException, match="Cannot prove duplicated index"):
            standard_tree.get_multi_proof([1, 1])


class TestStaticVerify:
    """Verification with only a trusted root."""

    def test_verify_leaf_in_root(self, standard_tree, values):
        proof = standard_tree.get_proof(3)

        assert StandardMerkleTree.verify_leaf_in_root(
            standard_tree.root, list(ENCODING), values[3], proof,
        )
        assert not StandardMerkleTree.verify_leaf_in_root(
            standard_tree.root, list(ENCODING), values[2], proof,
        )

    def test_verify_leaves_in_root(self, standard_tree):
        multiproof = standard_tree.get_multi_proof([0, 3, 4])

        assert StandardMerkleTree.verify_leaves_in_root(
            standard_tree.root, list(ENCODING), multiproof,
        )

    def test_poseidon_tree(self, standard_tree, values):
        tree = StandardMerkleTree.of(values, list(ENCODING), hasher=POSEIDON_HASHER)
        proof = tree.get_proof(1)

        assert tree.root != standard_tree.root
        assert StandardMerkleTree.verify_leaf_in_root(
            tree.root, list(ENCODING), values[1], proof, hasher=POSEIDON_HASHER,
        )
        assert not StandardMerkleTree.verify_leaf_in_root(
            tree.root, list(ENCODING), values[1], proof,
        )
        assert StandardMerkleTree.load(tree.dump(), hasher=POSEIDON_HASHER).root == tree.root

    def test_wrong_root(self, standard_tree, values):
        other = make_standard_tree(4)
        proof = standard_tree.get_proof(0)

        assert not StandardMerkleTree.verify_leaf_in_root(
            other.root, list(ENCODING), values[0], proof,
        )


class TestDumpLoad:
    """Tests for dump() / load()."""

    def test_dump_shape(self, standard_tree, dump_dict):
        assert dump_dict["format"] == STANDARD_FORMAT
        assert dump_dict["leafEncoding"] == list(ENCODING)
        assert dump_dict["tree"][0] == standard_tree.root
        assert dump_dict["values"][0] == {"value": make_values(1)[0], "treeIndex": 8}

    def test_round_trip(self, standard_tree, dump_dict):
        loaded = StandardMerkleTree.load(dump_dict)

        assert loaded.root == standard_tree.root
        assert loaded.tree == standard_tree.tree
        assert list(loaded) == list(standard_tree)
        assert loaded.get_proof(2) == standard_tree.get_proof(2)

    def test_load_from_model(self, standard_tree):
        loaded = StandardMerkleTree.load(standard_tree.dump())
        assert loaded.root == standard_tree.root

    def test_uppercase_hex_accepted(self, standard_tree, dump_dict):
        dump_dict["tree"] = ["0x" + node[2:].upper() for node in dump_dict["tree"]]
        assert StandardMerkleTree.load(dump_dict).root == standard_tree.root

    def test_unknown_format(self, dump_dict):
        dump_dict["format"] = "standard-v2"
        with pytest.raises(InvalidArgumentException, match="Unknown format 'standard-v2'"):
            StandardMerkleTree.load(dump_dict)

    def test_unknown_format_on_model(self, standard_tree):
        data = standard_tree.dump().model_copy(update={"format": "nope"})
        with pytest.raises(InvalidArgumentException, match="Unknown format 'nope'"):
            StandardMerkleTree.load(data)

    def test_missing_leaf_encoding(self, dump_dict):
        del dump_dict["leafEncoding"]
        with pytest.raises(InvalidArgumentException, match="Expected leaf encoding"):
            StandardMerkleTree.load(dump_dict)

    def test_malformed_dump(self, dump_dict):
        dump_dict["unexpected"] = True
        with pytest.raises(InvalidArgumentException, match="Malformed tree dump") as exc_info:
            StandardMerkleTree.load(dump_dict)
        assert exc_info.value.details["errors"]

    def test_tampered_value(self, dump_dict):
        dump_dict["values"][0]["value"][1] = 1
        with pytest.raises(InvalidArgumentException, match="does not contain the expected value"):
            StandardMerkleTree.load(dump_dict)

    def test_tampered_internal_node(self, dump_dict):
        dump_dict["tree"][0] = "0x" + "00" * 32
        with pytest.raises(InvalidArgumentException, match="Merkle tree is invalid"):
            StandardMerkleTree.load(dump_dict)

    def test_value_pointing_at_internal_node(self, dump_dict):
        dump_dict["values"][0]["treeIndex"] = 0
        with pytest.raises(InvalidArgumentException, match="Index is not a leaf"):
            StandardMerkleTree.load(dump_dict)

    def test_skip_validation(self, dump_dict):
        dump_dict["values"][0]["value"][1] = 1
        loaded = StandardMerkleTree.load(dump_dict, validate=False)

        assert len(loaded) == 5
        with pytest.raises(InvalidArgumentException):
            loaded.validate()

    def test_skip_validation_with_out_of_range_value(self, dump_dict):
        """Unvalidated loads do not hash values; validate() reports the bad one."""
        dump_dict["values"][2]["value"][1] = 2**256
        loaded = StandardMerkleTree.load(dump_dict, validate=False)

        assert loaded.root == dump_dict["tree"][0]
        assert loaded.get_proof(0) == make_standard_tree(5).get_proof(0)
        with pytest.raises(InvalidArgumentException, match="Value is too large for type u256"):
            loaded.validate()

    def test_wrong_hasher_fails_validation(self, dump_dict):
        with pytest.raises(InvalidArgumentException, match="does not contain the expected value"):
            StandardMerkleTree.load(dump_dict, hasher=POSEIDON_HASHER)

    def test_dump_model_by_name(self, standard_tree):
        data = StandardMerkleTreeData(
            leaf_encoding=list(ENCODING),
            tree=[to_hex(node) for node in standard_tree.tree],
            values=standard_tree.dump().values,
        )
        assert data.format == STANDARD_FORMAT
        assert "leafEncoding" in data.to_json()


class TestGenericMerkleTree:
    """MerkleTree with a caller-supplied leaf hash."""

    def test_string_values(self):
        words = ["alpha", "beta", "gamma"]

        def leaf_hash(word: str) -> bytes:
            return make_leaf(word)

        tree, indexed = MerkleTree.prepare(words, leaf_hash, standard_node_hash)
        merkle = MerkleTree(tree, indexed, leaf_hash, standard_node_hash)

        assert [entry.tree_index for entry in indexed] == [4, 3, 2]
        assert merkle.verify("beta", merkle.get_proof("beta"))
        merkle.validate()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
