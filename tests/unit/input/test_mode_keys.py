"""Tests for modal key handlers and terminal key decoding."""

from __future__ import annotations

import os
import unittest

from navit.input import reader
from navit.input.key_registry import KeyComboBinding, KeyComboRegistry
from navit.input.keys import KeyEvent, key_for_char
from navit.input.modes import (
    BookmarkKeyCallbacks,
    ConfirmKeyCallbacks,
    HelpKeyCallbacks,
    PromptKeyCallbacks,
    SearchKeyCallbacks,
    edit_line,
    handle_bookmarks_key,
    handle_confirm_key,
    handle_help_key,
    handle_prompt_key,
    handle_search_key,
)


class EditLineTests(unittest.TestCase):
    def test_editing_keys(self) -> None:
        self.assertEqual(edit_line("abc", KeyEvent("backspace")), "ab")
        self.assertEqual(edit_line("", KeyEvent("backspace")), "")
        self.assertEqual(edit_line("abc", KeyEvent("u", ctrl=True)), "")
        self.assertEqual(edit_line("mkdir new dir", KeyEvent("w", ctrl=True)), "mkdir new ")
        self.assertEqual(edit_line("ab", key_for_char("C")), "abC")
        self.assertEqual(edit_line("a", KeyEvent("space")), "a ")
        self.assertIsNone(edit_line("a", KeyEvent("up")))


class KeyComboRegistryTests(unittest.TestCase):
    def test_dispatch_and_handles(self) -> None:
        calls: list[str] = []
        registry = KeyComboRegistry().register_binding(KeyComboBinding(("ctrl+x", "X"), lambda: calls.append("x")))

        self.assertTrue(registry.handles(KeyEvent("x", ctrl=True)))
        self.assertTrue(registry.handles(key_for_char("X")))
        self.assertFalse(registry.handles(KeyEvent("x")))
        registry.dispatch(KeyEvent("x", ctrl=True))
        self.assertIsNone(registry.dispatch(KeyEvent("y")))
        self.assertEqual(calls, ["x"])

    def test_invalid_combo_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            KeyComboRegistry().register_binding(KeyComboBinding(("ctrl+",), lambda: None))


class ModalHandlerTests(unittest.TestCase):
    def test_confirm_answers_and_swallows_other_keys(self) -> None:
        answers: list[bool] = []
        callbacks = ConfirmKeyCallbacks(answer=answers.append)

        for event in (KeyEvent("x"), KeyEvent("y"), key_for_char("N"), KeyEvent("escape")):
            self.assertTrue(handle_confirm_key(event, callbacks))

        self.assertEqual(answers, [True, False, False])

    def test_prompt_edits_submits_and_cancels(self) -> None:
        values: list[str] = []
        submitted: list[str] = []
        cancelled: list[bool] = []
        callbacks = PromptKeyCallbacks(
            set_value=values.append,
            submit=submitted.append,
            cancel=lambda: cancelled.append(True),
            complete=lambda value: "rename " if value == "ren" else None,
        )

        handle_prompt_key(KeyEvent("x"), "ab", callbacks)
        handle_prompt_key(KeyEvent("tab"), "ren", callbacks)
        handle_prompt_key(KeyEvent("tab"), "zzz", callbacks)
        handle_prompt_key(KeyEvent("return"), "mkdir a", callbacks)
        handle_prompt_key(KeyEvent("c", ctrl=True), "mkdir a", callbacks)

        self.assertEqual(values, ["abx", "rename "])
        self.assertEqual(submitted, ["mkdir a"])
        self.assertEqual(cancelled, [True])

    def test_search_moves_and_filters(self) -> None:
        queries: list[str] = []
        moves: list[int] = []
        flags: list[str] = []
        callbacks = SearchKeyCallbacks(
            set_query=queries.append,
            accept=lambda: flags.append("accept"),
            cancel=lambda: flags.append("cancel"),
            move=moves.append,
        )

        handle_search_key(KeyEvent("e"), "r", callbacks)
        handle_search_key(KeyEvent("down"), "re", callbacks)
        handle_search_key(KeyEvent("p", ctrl=True), "re", callbacks)
        handle_search_key(KeyEvent("backspace"), "", callbacks)
        handle_search_key(KeyEvent("return"), "re", callbacks)
        handle_search_key(KeyEvent("escape"), "re", callbacks)

        self.assertEqual(queries, ["re"])
        self.assertEqual(moves, [1, -1])
        self.assertEqual(flags, ["accept", "cancel"])

    def test_help_closes_on_question_mark(self) -> None:
        closed: list[bool] = []
        callbacks = HelpKeyCallbacks(close=lambda: closed.append(True))

        handle_help_key(KeyEvent("j"), callbacks)
        handle_help_key(KeyEvent("?"), callbacks)

        self.assertEqual(closed, [True])

    def test_bookmarks_navigation(self) -> None:
        log: list[object] = []
        callbacks = BookmarkKeyCallbacks(
            move=log.append,
            activate=lambda: log.append("activate"),
            remove=lambda: log.append("remove"),
            close=lambda: log.append("close"),
        )

        for key in ("j", "k", "return", "d", "escape"):
            handle_bookmarks_key(KeyEvent(key), callbacks)

        self.assertEqual(log, [1, -1, "activate", "remove", "close"])


class ReadKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        reader._PENDING_BYTES.clear()
        self.read_fd, self.write_fd = os.pipe()

    def tearDown(self) -> None:
        os.close(self.read_fd)
        os.close(self.write_fd)
        reader._PENDING_BYTES.clear()

    def _keys(self, data: bytes, count: int) -> list[KeyEvent | None]:
        os.write(self.write_fd, data)
        return [reader.read_key(self.read_fd, timeout_ms=50) for _ in range(count)]

    def test_plain_and_control_bytes(self) -> None:
        keys = self._keys(b"jN\x03\r\x7f ", 6)

        self.assertEqual(
            keys,
            [
                KeyEvent("j"),
                KeyEvent("n", shift=True),
                KeyEvent("c", ctrl=True),
                KeyEvent("return"),
                KeyEvent("backspace"),
                KeyEvent("space"),
            ],
        )

    def test_escape_sequences(self) -> None:
        keys = self._keys(b"\x1b[A\x1b[6~\x1b[1;5B\x1b[3~", 4)

        self.assertEqual(
            keys,
            [
                KeyEvent("up"),
                KeyEvent("pagedown"),
                KeyEvent("down", ctrl=True),
                KeyEvent("delete"),
            ],
        )

    def test_lone_escape_and_meta_keys(self) -> None:
        self.assertEqual(self._keys(b"\x1b", 1), [KeyEvent("escape")])
        self.assertEqual(self._keys(b"\x1bx", 1), [KeyEvent("x", meta=True)])

    def test_utf8_character(self) -> None:
        self.assertEqual(self._keys("é".encode("utf-8"), 1), [KeyEvent("é")])

    def test_timeout_returns_none(self) -> None:
        self.assertIsNone(reader.read_key(self.read_fd, timeout_ms=0))

    def test_decode_control_byte(self) -> None:
        self.assertEqual(reader.decode_control_byte(0x06), KeyEvent("f", ctrl=True))
        self.assertEqual(reader.decode_control_byte(0x09), KeyEvent("tab"))
        self.assertIsNone(reader.decode_control_byte(0x1C))


if __name__ == "__main__":
    unittest.main()
