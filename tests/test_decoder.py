"""
Tests for the decoder — binary heuristic, tree/commit/tag parsing, enrichment

Validates:
- Binary detection thresholds (NUL byte, printable ratio, scan limit)
- Tree entries decode in stored order with derived types
- Commit parent cardinality and header precedence
- Continuation lines (gpgsig) fold into the previous header
- Truncated trees keep the entries read so far
"""

import logging

import pytest

from gitloupe.core.decoder import (
    is_binary_blob, entry_type_for_mode, parse_tree, serialize_tree,
    split_headers, parse_commit, parse_tag, enrich,
    extract_timestamp, format_ident_date
)
from gitloupe.core.objects import GitObject, ObjectType, CommitContent, TagContent
from tests.factories import commit_payload, tag_payload, tree_entries, ident


BLOB_HASH = "3b18e512dba79e4c8300dd08aeb37f8e728b8dad"
TREE_HASH = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"


class TestBinaryHeuristic:

    def test_nul_bytes_are_binary(self):
        assert is_binary_blob(b"\x00" * 10) is True

    def test_plain_letters_are_text(self):
        assert is_binary_blob(b"a" * 1000) is False

    def test_empty_is_text(self):
        assert is_binary_blob(b"") is False

    def test_mostly_non_printable_is_binary(self):
        # 5 printable bytes in 100: 5% < 10%
        assert is_binary_blob(b"abcde" + bytes([0x80]) * 95) is True

    def test_enough_printable_is_text(self):
        # 20 printable bytes in 100
        assert is_binary_blob(b"a" * 20 + bytes([0x80]) * 80) is False

    def test_utf8_text_is_text(self):
        assert is_binary_blob("héllo wörld, ça va?\n".encode("utf-8")) is False

    def test_nul_after_scan_limit_is_ignored(self):
        content = b"a" * 8000 + b"\x00" * 100
        assert is_binary_blob(content) is False

    def test_nul_inside_scan_limit(self):
        content = b"a" * 7999 + b"\x00"
        assert is_binary_blob(content) is True


class TestModes:

    @pytest.mark.parametrize("mode,expected", [
        ("100644", "blob"),
        ("100755", "blob"),
        ("100664", "blob"),
        ("0644", "blob"),
        ("00644", "blob"),
        ("120000", "blob"),
        ("40000", "tree"),
        ("040000", "tree"),
        ("0000", "tree"),
        ("160000", "commit"),
        ("777", "unknown"),
    ])
    def test_entry_type_for_mode(self, mode, expected):
        assert entry_type_for_mode(mode) == expected


class TestParseTree:

    def test_blob_and_tree_entries(self):
        payload = (
            b"100644 file.txt\0" + bytes.fromhex(BLOB_HASH)
            + b"40000 subdir\0" + bytes.fromhex(TREE_HASH)
        )
        entries = parse_tree(payload)

        assert len(entries) == 2
        assert (entries[0].mode, entries[0].entry_type, entries[0].hash, entries[0].name) == \
            ("100644", "blob", BLOB_HASH, "file.txt")
        assert (entries[1].mode, entries[1].entry_type, entries[1].hash, entries[1].name) == \
            ("40000", "tree", TREE_HASH, "subdir")

    def test_empty_tree(self):
        assert parse_tree(b"") == []

    def test_stored_order_is_kept(self):
        entries = tree_entries([
            ("100644", "zeta", BLOB_HASH),
            ("100644", "alpha", BLOB_HASH),
        ])
        assert [e.name for e in parse_tree(serialize_tree(entries))] == ["zeta", "alpha"]

    def test_reencoding_is_idempotent(self):
        entries = tree_entries([
            ("100644", "README.md", BLOB_HASH),
            ("100755", "run.sh", BLOB_HASH),
            ("120000", "link", BLOB_HASH),
            ("40000", "src", TREE_HASH),
            ("160000", "vendor", BLOB_HASH),
        ])
        payload = serialize_tree(entries)
        assert parse_tree(payload) == entries
        assert serialize_tree(parse_tree(payload)) == payload

    def test_name_with_spaces_and_utf8(self):
        entries = tree_entries([("100644", "my file é.txt", BLOB_HASH)])
        assert parse_tree(serialize_tree(entries))[0].name == "my file é.txt"

    def test_truncated_hash_keeps_previous_entries(self, caplog):
        payload = (
            b"100644 README\0" + bytes.fromhex(BLOB_HASH)
            + b"100644 broken\0" + bytes.fromhex(BLOB_HASH)[:7]
        )
        with caplog.at_level(logging.WARNING, logger="gitloupe.core.decoder"):
            entries = parse_tree(payload)

        assert [e.name for e in entries] == ["README"]
        assert "Truncated tree" in caplog.text

    def test_trailing_garbage_is_dropped(self):
        payload = b"100644 README\0" + bytes.fromhex(BLOB_HASH) + b"100644 dangling"
        assert [e.name for e in parse_tree(payload)] == ["README"]


class TestParseCommit:

    def test_root_commit_has_no_parents(self):
        header = parse_commit(commit_payload(TREE_HASH))
        assert header.parent == ()
        assert header.tree == TREE_HASH

    def test_single_parent(self):
        header = parse_commit(commit_payload(TREE_HASH, parents=["a" * 40]))
        assert header.parent == ("a" * 40,)

    def test_merge_parents_in_file_order(self):
        header = parse_commit(commit_payload(TREE_HASH, parents=["b" * 40, "a" * 40]))
        assert header.parent == ("b" * 40, "a" * 40)

    def test_message_after_blank_line(self):
        header = parse_commit(commit_payload(TREE_HASH, message="Fix bug\n\nDetails"))
        assert header.message == "Fix bug\n\nDetails"

    def test_author_and_committer(self):
        header = parse_commit(commit_payload(
            TREE_HASH,
            author=ident(1700000000, who="Ada <ada@example.com>"),
            committer=ident(1700000100, who="Bob <bob@example.com>"),
        ))
        assert header.author == "Ada <ada@example.com> 1700000000 +0000"
        assert header.committer == "Bob <bob@example.com> 1700000100 +0000"

    def test_merge_commit_with_body(self):
        header = parse_commit(commit_payload(
            TREE_HASH, parents=["a" * 40, "b" * 40], message="Fix bug\n\nDetails"
        ))
        assert header.parent == ("a" * 40, "b" * 40)
        assert header.message.split("\n", 1)[0] == "Fix bug"
        assert header.message == "Fix bug\n\nDetails"

    def test_last_occurrence_wins_for_single_keys(self):
        payload = f"tree {'1' * 40}\ntree {'2' * 40}\n\nmsg".encode()
        assert parse_commit(payload).tree == "2" * 40

    def test_gpgsig_continuation_lines(self):
        signature = [
            "gpgsig -----BEGIN PGP SIGNATURE-----",
            " ",
            " iQEzBAABCAAdFiEE",
            " -----END PGP SIGNATURE-----",
        ]
        header = parse_commit(commit_payload(
            TREE_HASH, message="Signed\n", extra_headers=signature
        ))
        assert header.extra["gpgsig"] == (
            "-----BEGIN PGP SIGNATURE-----\n\niQEzBAABCAAdFiEE\n-----END PGP SIGNATURE-----"
        )
        assert header.message == "Signed\n"
        assert header.committer.startswith("Test User")

    def test_missing_headers_default_empty(self):
        header = parse_commit(b"\njust a message")
        assert header.tree == ""
        assert header.author == ""
        assert header.message == "just a message"

    def test_invalid_utf8_is_replaced(self):
        payload = commit_payload(TREE_HASH, message="ok\n") + b"\xff\xfe"
        assert "�" in parse_commit(payload).message


class TestSplitHeaders:

    def test_lines_without_space_are_ignored(self):
        headers, message = split_headers("tree abc\nbogus\nauthor x\n\nbody")
        assert headers == [("tree", "abc"), ("author", "x")]
        assert message == "body"

    def test_no_blank_line_means_empty_message(self):
        headers, message = split_headers("tree abc")
        assert headers == [("tree", "abc")]
        assert message == ""


class TestParseTag:

    def test_annotated_tag(self):
        header = parse_tag(tag_payload("c" * 40, name="v2.0", message="Second release\n"))
        assert header.object == "c" * 40
        assert header.object_type == "commit"
        assert header.tag == "v2.0"
        assert header.tagger.startswith("Test User <test@example.com>")
        assert header.message == "Second release\n"


class TestEnrich:

    def _enrich(self, object_type, content, packed=False):
        from gitloupe.core.objects import compute_object_hash
        obj = GitObject(object_type, compute_object_hash(object_type, content), len(content), content)
        return enrich(obj, packed=packed)

    def test_commit(self):
        obj = self._enrich(ObjectType.COMMIT, commit_payload(TREE_HASH))
        assert isinstance(obj.parsed, CommitContent)
        assert obj.parsed_commit.tree == TREE_HASH
        assert obj.packed is False

    def test_tag(self):
        obj = self._enrich(ObjectType.TAG, tag_payload("c" * 40), packed=True)
        assert isinstance(obj.parsed, TagContent)
        assert obj.packed is True

    def test_binary_blob(self):
        obj = self._enrich(ObjectType.BLOB, b"\x89PNG\x00\x00")
        assert obj.is_binary_blob is True


class TestIdentities:

    def test_extract_timestamp(self):
        assert extract_timestamp("A <a@x> 1700000000 +0100") == 1700000000

    def test_extract_timestamp_missing(self):
        assert extract_timestamp("A <a@x>") == 0
        assert extract_timestamp("") == 0

    def test_format_ident_date_uses_own_offset(self):
        assert format_ident_date("A <a@x> 1700000000 +0100") == "2023-11-14 23:13:20 +0100"
        assert format_ident_date("A <a@x> 1700000000 -0530") == "2023-11-14 16:43:20 -0530"

    def test_format_ident_date_missing(self):
        assert format_ident_date("A <a@x>") == ""
