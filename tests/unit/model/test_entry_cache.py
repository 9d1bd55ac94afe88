"""Tests for entry identity assignment and refetch bracketing."""

from __future__ import annotations

import unittest

from lazydir.model import ENTRY_DIRECTORY, ENTRY_FILE, ENTRY_LINK, EntryCache, ListedEntry, parent_url, parse_url


class EntryCacheTests(unittest.TestCase):
    def test_identities_are_unique_and_stable_for_same_name(self) -> None:
        cache = EntryCache()
        first = cache.create_and_store_entry("mem://a/", "x", ENTRY_FILE)
        second = cache.create_and_store_entry("mem://a/", "y", ENTRY_FILE)
        again = cache.create_and_store_entry("mem://a/", "x", ENTRY_FILE, {"size": 3})

        self.assertNotEqual(first.identity, second.identity)
        self.assertEqual(again.identity, first.identity)
        self.assertEqual(cache.get_entry_by_id(first.identity).metadata, {"size": 3})

    def test_format_id_pads_to_width_of_next_identity(self) -> None:
        cache = EntryCache()
        for index in range(12):
            cache.create_and_store_entry("mem://a/", f"f{index}", ENTRY_FILE)

        self.assertEqual(cache.format_id(3), "/03")
        self.assertEqual(EntryCache.parse_id("/03 d name"), (3, "/03"))
        self.assertIsNone(EntryCache.parse_id("name without id"))

    def test_refetch_keeps_identities_and_drops_vanished_names(self) -> None:
        cache = EntryCache()
        kept = cache.create_and_store_entry("mem://a/", "kept", ENTRY_FILE)
        gone = cache.create_and_store_entry("mem://a/", "gone", ENTRY_FILE)

        cache.begin_update_url("mem://a/")
        self.assertEqual(set(cache.list_url("mem://a/")), {"kept", "gone"})
        cache.store_listed("mem://a/", [ListedEntry(name="kept", type=ENTRY_FILE), ListedEntry(name="new", type=ENTRY_FILE)])
        cache.end_update_url("mem://a/")

        listing = cache.list_url("mem://a/")
        self.assertEqual(set(listing), {"kept", "new"})
        self.assertEqual(listing["kept"].identity, kept.identity)
        self.assertIsNone(cache.get_entry_by_id(gone.identity))
        self.assertGreater(listing["new"].identity, gone.identity)

    def test_abort_update_restores_unlisted_entries(self) -> None:
        cache = EntryCache()
        cache.create_and_store_entry("mem://a/", "one", ENTRY_FILE)
        cache.begin_update_url("mem://a/")
        cache.abort_update_url("mem://a/")

        self.assertEqual(set(cache.list_url("mem://a/")), {"one"})

    def test_list_url_returns_snapshot(self) -> None:
        cache = EntryCache()
        cache.create_and_store_entry("mem://a/", "one", ENTRY_FILE)
        snapshot = cache.list_url("mem://a/")
        cache.create_and_store_entry("mem://a/", "two", ENTRY_FILE)

        self.assertEqual(set(snapshot), {"one"})

    def test_clear_everything_never_reissues_identities(self) -> None:
        cache = EntryCache()
        old = cache.create_and_store_entry("mem://a/", "one", ENTRY_FILE)
        cache.clear_everything()
        new = cache.create_and_store_entry("mem://a/", "one", ENTRY_FILE)

        self.assertEqual(len(cache), 1)
        self.assertNotEqual(new.identity, old.identity)

    def test_link_to_directory_counts_as_directory(self) -> None:
        cache = EntryCache()
        link = cache.create_entry("mem://a/", "ln", ENTRY_LINK, {"link": "../d", "link_type": ENTRY_DIRECTORY})
        dangling = cache.create_entry("mem://a/", "dl", ENTRY_LINK, {"link": "nowhere"})

        self.assertTrue(link.is_directory())
        self.assertFalse(dangling.is_directory())


class UrlTests(unittest.TestCase):
    def test_parse_url_splits_scheme_and_path(self) -> None:
        self.assertEqual(parse_url("mem://a/b/"), ("mem://", "a/b/"))
        self.assertEqual(parse_url("file:///tmp/"), ("file://", "/tmp/"))
        self.assertEqual(parse_url("not a url"), (None, None))

    def test_parent_url_returns_container_and_child_name(self) -> None:
        self.assertEqual(parent_url("mem://a/b/"), ("mem://a/", "b"))
        self.assertEqual(parent_url("mem://a/"), ("mem://", "a"))
        self.assertEqual(parent_url("file:///tmp/"), ("file:///", "tmp"))
        self.assertEqual(parent_url("file:///"), ("file:///", None))


if __name__ == "__main__":
    unittest.main()
