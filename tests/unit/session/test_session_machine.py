"""Tests for the pure session reducer."""

from __future__ import annotations

import random
import unittest
from pathlib import Path

from navit.file_model.types import GIT_MODIFIED, KIND_DIRECTORY, KIND_FILE, Entry, GitInfo, PreviewPayload
from navit.session import events as ev
from navit.session.machine import SessionMachine, filter_entries, scroll_to_include
from navit.session.state import (
    MODE_COMMAND,
    MODE_CONFIRM,
    MODE_DEEP_SEARCH,
    MODE_HELP,
    MODE_NORMAL,
    MODE_SEARCH,
    MODE_TEXT_INPUT,
    Clipboard,
    CLIPBOARD_COPY,
    SessionState,
)

ROOT = Path("/work")


def _entry(name: str, *, directory: bool = False, parent: Path = ROOT) -> Entry:
    return Entry(
        name=name,
        path=parent / name,
        kind=KIND_DIRECTORY if directory else KIND_FILE,
        is_dir=directory,
        hidden=name.startswith("."),
    )


def _loaded(names: list[str], *, rows: int = 20, path: Path = ROOT) -> SessionState:
    machine = SessionMachine()
    state = SessionState.initial(path, viewport_rows=rows)
    state = machine.apply(state, ev.DirectoryRequested(path, 1))
    entries = tuple(_entry(name, parent=path) for name in names)
    return machine.apply(state, ev.DirectoryLoaded(path, 1, entries))


class DirectoryResultTests(unittest.TestCase):
    def setUp(self) -> None:
        self.machine = SessionMachine()

    def test_load_commits_listing_and_clears_loading(self) -> None:
        state = SessionState.initial(ROOT)
        state = self.machine.apply(state, ev.DirectoryRequested(ROOT / "sub", 1))
        self.assertTrue(state.loading)
        self.assertEqual(state.current_path, ROOT)

        state = self.machine.apply(
            state,
            ev.DirectoryLoaded(ROOT / "sub", 1, (_entry("x", parent=ROOT / "sub"),)),
        )

        self.assertFalse(state.loading)
        self.assertEqual(state.current_path, ROOT / "sub")
        self.assertEqual([entry.name for entry in state.filtered_entries], ["x"])
        self.assertEqual(state.selected_index, 0)

    def test_stale_request_id_is_discarded(self) -> None:
        state = SessionState.initial(ROOT)
        state = self.machine.apply(state, ev.DirectoryRequested(ROOT / "a", 1))
        state = self.machine.apply(state, ev.DirectoryRequested(ROOT / "b", 2))

        late = self.machine.apply(state, ev.DirectoryLoaded(ROOT / "a", 1, (_entry("a1"),)))

        self.assertIs(late, state)
        self.assertEqual(late.current_path, ROOT)

    def test_same_path_requested_twice_applies_only_latest(self) -> None:
        state = SessionState.initial(ROOT)
        state = self.machine.apply(state, ev.DirectoryRequested(ROOT / "a", 1))
        state = self.machine.apply(state, ev.DirectoryRequested(ROOT / "b", 2))
        state = self.machine.apply(state, ev.DirectoryRequested(ROOT / "a", 3))

        stale = self.machine.apply(state, ev.DirectoryLoaded(ROOT / "a", 1, ()))
        fresh = self.machine.apply(state, ev.DirectoryLoaded(ROOT / "a", 3, ()))

        self.assertIs(stale, state)
        self.assertEqual(fresh.current_path, ROOT / "a")

    def test_load_failure_keeps_previous_listing(self) -> None:
        state = _loaded(["keep.txt"])
        state = self.machine.apply(state, ev.DirectoryRequested(ROOT / "locked", 2))

        state = self.machine.apply(state, ev.DirectoryLoadFailed(ROOT / "locked", 2, "Permission denied"))

        self.assertEqual(state.current_path, ROOT)
        self.assertEqual(state.target_path, ROOT)
        self.assertEqual(state.error, "Permission denied")
        self.assertFalse(state.loading)
        self.assertEqual([entry.name for entry in state.entries], ["keep.txt"])

    def test_refresh_prunes_selection_and_keeps_cursor(self) -> None:
        state = _loaded(["a", "b", "c"])
        state = self.machine.apply(state, ev.SelectionToggled(ROOT / "a"))
        state = self.machine.apply(state, ev.SelectionToggled(ROOT / "c"))
        state = self.machine.apply(state, ev.SelectionMoved(1))
        state = self.machine.apply(state, ev.DirectoryRequested(ROOT, 2))

        state = self.machine.apply(
            state,
            ev.DirectoryLoaded(ROOT, 2, (_entry("a"), _entry("b")), refresh=True),
        )

        self.assertEqual(state.selected_files, frozenset({ROOT / "a"}))
        self.assertEqual(state.selected_entry.name, "b")

    def test_navigation_leaves_selection_untouched(self) -> None:
        state = _loaded(["a"])
        state = self.machine.apply(state, ev.SelectionToggled(ROOT / "a"))
        state = self.machine.apply(state, ev.DirectoryRequested(ROOT / "sub", 2))

        state = self.machine.apply(state, ev.DirectoryLoaded(ROOT / "sub", 2, ()))

        self.assertEqual(state.selected_files, frozenset({ROOT / "a"}))
        self.assertEqual(state.selection_in_listing(), ())

    def test_preferred_path_places_cursor(self) -> None:
        state = SessionState.initial(ROOT)
        state = self.machine.apply(state, ev.DirectoryRequested(ROOT, 1))
        entries = (_entry("a"), _entry("b"), _entry("c"))

        state = self.machine.apply(state, ev.DirectoryLoaded(ROOT, 1, entries, preferred_path=ROOT / "c"))

        self.assertEqual(state.selected_index, 2)

    def test_git_result_for_other_directory_is_discarded(self) -> None:
        state = _loaded(["a"])
        state = self.machine.apply(state, ev.GitInfoRequested(ROOT, 1))
        info = GitInfo(is_repo=True, branch="main", status_by_name={"a": GIT_MODIFIED}, is_clean=False)

        elsewhere = self.machine.apply(state, ev.GitInfoLoaded(ROOT / "other", 1, info))
        applied = self.machine.apply(state, ev.GitInfoLoaded(ROOT, 1, info))

        self.assertIs(elsewhere, state)
        self.assertEqual(applied.git_info.branch, "main")
        self.assertEqual(applied.entries[0].git_status, GIT_MODIFIED)

    def test_git_result_with_old_request_id_is_discarded(self) -> None:
        state = _loaded(["a"])
        state = self.machine.apply(state, ev.GitInfoRequested(ROOT, 1))
        state = self.machine.apply(state, ev.GitInfoRequested(ROOT, 2))

        stale = self.machine.apply(state, ev.GitInfoLoaded(ROOT, 1, GitInfo.not_a_repository()))

        self.assertIs(stale, state)


class ListViewTests(unittest.TestCase):
    def setUp(self) -> None:
        self.machine = SessionMachine()

    def test_index_and_scroll_bounds_hold_under_any_movement(self) -> None:
        rng = random.Random(7)
        names = [f"f{idx:02d}" for idx in range(12)]
        for rows in (1, 3, 5, 20):
            state = _loaded(names, rows=rows)
            for _ in range(300):
                choice = rng.randrange(4)
                if choice == 0:
                    event = ev.SelectionMoved(rng.randint(-15, 15))
                elif choice == 1:
                    event = ev.PageMoved(rng.choice((-1, 1)))
                elif choice == 2:
                    event = ev.SearchQueryChanged(rng.choice(("", "f0", "f1", "zz", "1")))
                else:
                    event = ev.ViewportResized(rng.randint(1, 8))
                state = self.machine.apply(state, event)

                count = len(state.filtered_entries)
                if count == 0:
                    self.assertEqual(state.selected_index, 0)
                    continue
                self.assertGreaterEqual(state.selected_index, 0)
                self.assertLess(state.selected_index, count)
                self.assertLessEqual(state.scroll_offset, state.selected_index)
                self.assertLess(state.selected_index, state.scroll_offset + state.viewport_rows)

    def test_scroll_adjusts_minimally(self) -> None:
        state = _loaded([f"f{idx}" for idx in range(10)], rows=3)

        state = self.machine.apply(state, ev.SelectionMoved(3))
        self.assertEqual((state.selected_index, state.scroll_offset), (3, 1))

        state = self.machine.apply(state, ev.SelectionMoved(-1))
        self.assertEqual((state.selected_index, state.scroll_offset), (2, 1))

        state = self.machine.apply(state, ev.SelectionMoved(-2))
        self.assertEqual((state.selected_index, state.scroll_offset), (0, 0))

    def test_scroll_to_include_clamps_to_list_end(self) -> None:
        self.assertEqual(scroll_to_include(9, 0, 4, 10), 6)
        self.assertEqual(scroll_to_include(0, 5, 4, 10), 0)
        self.assertEqual(scroll_to_include(0, 3, 20, 2), 0)

    def test_page_moves_by_viewport_and_clamps(self) -> None:
        state = _loaded([f"f{idx}" for idx in range(10)], rows=4)

        state = self.machine.apply(state, ev.PageMoved(1))
        self.assertEqual(state.selected_index, 4)
        state = self.machine.apply(state, ev.PageMoved(1))
        state = self.machine.apply(state, ev.PageMoved(1))
        self.assertEqual(state.selected_index, 9)
        state = self.machine.apply(state, ev.PageMoved(-1))
        self.assertEqual(state.selected_index, 5)

    def test_empty_query_restores_full_listing(self) -> None:
        state = _loaded(["alpha", "beta", "Alpine"])

        filtered = self.machine.apply(state, ev.SearchQueryChanged("AL"))
        restored = self.machine.apply(filtered, ev.SearchQueryChanged(""))

        self.assertEqual([entry.name for entry in filtered.filtered_entries], ["alpha", "Alpine"])
        self.assertEqual(restored.filtered_entries, restored.entries)
        self.assertEqual(restored.selected_index, 0)

    def test_filter_entries_is_case_insensitive_substring(self) -> None:
        entries = (_entry("README.md"), _entry("src"), _entry("readme-old"))
        self.assertEqual([entry.name for entry in filter_entries(entries, "read")], ["README.md", "readme-old"])
        self.assertEqual(filter_entries(entries, ""), entries)

    def test_toggle_twice_restores_selection(self) -> None:
        state = _loaded(["a", "b"])
        state = self.machine.apply(state, ev.SelectionToggled(ROOT / "b"))
        before = state.selected_files

        state = self.machine.apply(state, ev.SelectionToggled(ROOT / "a"))
        state = self.machine.apply(state, ev.SelectionToggled(ROOT / "a"))

        self.assertEqual(state.selected_files, before)

    def test_select_all_covers_filtered_entries(self) -> None:
        state = _loaded(["apple", "banana", "apricot"])
        state = self.machine.apply(state, ev.SearchQueryChanged("ap"))

        state = self.machine.apply(state, ev.AllSelected())

        self.assertEqual(state.selected_files, frozenset({ROOT / "apple", ROOT / "apricot"}))
        state = self.machine.apply(state, ev.SelectionCleared())
        self.assertEqual(state.selected_files, frozenset())

    def test_cursor_placed_ignores_unknown_path(self) -> None:
        state = _loaded(["a", "b"])
        self.assertIs(self.machine.apply(state, ev.CursorPlaced(ROOT / "zzz")), state)
        self.assertEqual(self.machine.apply(state, ev.CursorPlaced(ROOT / "b")).selected_index, 1)


class PreviewTests(unittest.TestCase):
    def setUp(self) -> None:
        self.machine = SessionMachine()

    def test_preview_for_other_entry_is_discarded(self) -> None:
        state = _loaded(["a", "b"])
        state = self.machine.apply(state, ev.PreviewRequested(ROOT / "a"))
        state = self.machine.apply(state, ev.SelectionMoved(1))

        late = self.machine.apply(state, ev.PreviewLoaded(ROOT / "a", PreviewPayload(content="old", is_binary=False, truncated=False)))

        self.assertIs(late, state)

    def test_preview_loaded_resets_scroll(self) -> None:
        state = _loaded(["a"])
        state = self.machine.apply(state, ev.PreviewLoaded(ROOT / "a", PreviewPayload(content="1\n2\n3\n4", is_binary=False, truncated=False)))
        state = self.machine.apply(state, ev.PreviewScrolled(10))
        self.assertEqual(state.preview.scroll, 3)

        state = self.machine.apply(state, ev.PreviewLoaded(ROOT / "a", PreviewPayload(content="fresh", is_binary=False, truncated=False)))

        self.assertEqual(state.preview.scroll, 0)
        self.assertEqual(state.preview.content, "fresh")

    def test_preview_failure_is_recorded_on_preview(self) -> None:
        state = _loaded(["a"])
        state = self.machine.apply(state, ev.PreviewFailed(ROOT / "a", "Permission denied"))
        self.assertEqual(state.preview.error, "Permission denied")
        self.assertIsNone(state.error)


class ModeTransitionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.machine = SessionMachine()

    def test_modal_entries_only_from_normal(self) -> None:
        state = _loaded(["a"])
        state = self.machine.apply(state, ev.CommandEntered())
        self.assertEqual(state.mode, MODE_COMMAND)

        for event in (ev.SearchEntered(), ev.HelpEntered(), ev.ConfirmRequested("delete", "Delete?")):
            self.assertIs(self.machine.apply(state, event), state)

    def test_search_cancel_clears_filter_but_accept_keeps_it(self) -> None:
        state = _loaded(["alpha", "beta"])
        state = self.machine.apply(state, ev.SearchEntered())
        state = self.machine.apply(state, ev.InputChanged("be"))
        self.assertEqual(state.mode, MODE_SEARCH)
        self.assertEqual([entry.name for entry in state.filtered_entries], ["beta"])

        accepted = self.machine.apply(state, ev.ReturnedToNormal())
        cancelled = self.machine.apply(state, ev.Cancelled())

        self.assertEqual(accepted.mode, MODE_NORMAL)
        self.assertEqual(accepted.search_query, "be")
        self.assertEqual(cancelled.mode, MODE_NORMAL)
        self.assertEqual(cancelled.search_query, "")
        self.assertEqual(len(cancelled.filtered_entries), 2)

    def test_confirm_flow(self) -> None:
        state = _loaded(["a"])
        state = self.machine.apply(state, ev.ConfirmRequested("delete", "Delete 1 item?", (ROOT / "a",)))
        self.assertEqual(state.mode, MODE_CONFIRM)
        self.assertEqual(state.pending_confirm.paths, (ROOT / "a",))

        state = self.machine.apply(state, ev.ConfirmSubmitted(True))

        self.assertEqual(state.mode, MODE_NORMAL)
        self.assertIsNone(state.pending_confirm)

    def test_text_input_flow(self) -> None:
        state = _loaded(["a"])
        state = self.machine.apply(state, ev.InputRequested("rename", "Rename to:", initial="a", target=ROOT / "a"))
        self.assertEqual((state.mode, state.input_value), (MODE_TEXT_INPUT, "a"))

        state = self.machine.apply(state, ev.InputChanged("b"))
        state = self.machine.apply(state, ev.InputSubmitted("b"))

        self.assertEqual(state.mode, MODE_NORMAL)
        self.assertEqual(state.input_value, "")
        self.assertIsNone(state.pending_input)

    def test_cancel_in_normal_is_noop(self) -> None:
        state = _loaded(["a"])
        self.assertIs(self.machine.apply(state, ev.Cancelled()), state)

    def test_help_returns_to_normal(self) -> None:
        state = self.machine.apply(_loaded(["a"]), ev.HelpEntered())
        self.assertEqual(state.mode, MODE_HELP)
        self.assertEqual(self.machine.apply(state, ev.ReturnedToNormal()).mode, MODE_NORMAL)

    def test_deep_search_results_require_matching_query_and_root(self) -> None:
        state = self.machine.apply(_loaded(["a"]), ev.DeepSearchEntered())
        state = self.machine.apply(state, ev.DeepSearchRequested("rea", 4))
        self.assertEqual(state.mode, MODE_DEEP_SEARCH)
        self.assertTrue(state.deep_search.loading)
        hit = (_entry("README"),)

        wrong_query = self.machine.apply(state, ev.DeepSearchLoaded(ROOT, "re", 4, hit))
        wrong_root = self.machine.apply(state, ev.DeepSearchLoaded(ROOT / "x", "rea", 4, hit))
        wrong_id = self.machine.apply(state, ev.DeepSearchLoaded(ROOT, "rea", 3, hit))
        applied = self.machine.apply(state, ev.DeepSearchLoaded(ROOT, "rea", 4, hit))

        self.assertIs(wrong_query, state)
        self.assertIs(wrong_root, state)
        self.assertIs(wrong_id, state)
        self.assertEqual(applied.deep_search.results, hit)
        self.assertFalse(applied.deep_search.loading)

    def test_unknown_event_type_raises(self) -> None:
        with self.assertRaises(TypeError):
            self.machine.apply(_loaded([]), ev.Event())


class ClipboardAndMessageTests(unittest.TestCase):
    def setUp(self) -> None:
        self.machine = SessionMachine()

    def test_finished_operation_clears_only_consumed_clipboard(self) -> None:
        state = _loaded(["a", "b"])
        first = Clipboard(CLIPBOARD_COPY, (_entry("a"),))
        second = Clipboard(CLIPBOARD_COPY, (_entry("b"),))
        state = self.machine.apply(state, ev.ClipboardSet(first))

        cleared = self.machine.apply(state, ev.FileOperationFinished(message="done", consumed_clipboard=first))
        replaced = self.machine.apply(state, ev.ClipboardSet(second))
        kept = self.machine.apply(replaced, ev.FileOperationFinished(message="done", consumed_clipboard=first))

        self.assertIsNone(cleared.clipboard)
        self.assertIs(kept.clipboard, second)

    def test_message_and_error_are_exclusive_and_dismissable(self) -> None:
        state = _loaded(["a"])
        state = self.machine.apply(state, ev.MessageSet("hello"))
        state = self.machine.apply(state, ev.ErrorSet("boom"))
        self.assertEqual((state.message, state.error), (None, "boom"))

        state = self.machine.apply(state, ev.MessagesDismissed())
        self.assertEqual((state.message, state.error), (None, None))
        self.assertIs(self.machine.apply(state, ev.MessagesDismissed()), state)


if __name__ == "__main__":
    unittest.main()
