"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into ``KeyEvent`` values.
Handles ESC-sequence timing, control bytes, modifiers, and UTF-8 text.
"""

from __future__ import annotations

import os
import select

from .keys import KeyEvent, key_for_char

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []

_CSI_FINAL_KEYS = {
    b"A": "up",
    b"B": "down",
    b"C": "right",
    b"D": "left",
    b"H": "home",
    b"F": "end",
}
_CSI_TILDE_KEYS = {
    "1": "home",
    "2": "insert",
    "3": "delete",
    "4": "end",
    "5": "pageup",
    "6": "pagedown",
    "7": "home",
    "8": "end",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _modifier_flags(param: str) -> tuple[bool, bool, bool]:
    """Decode an xterm modifier parameter into ``(ctrl, meta, shift)``."""
    try:
        value = int(param) - 1
    except ValueError:
        return False, False, False
    return bool(value & 4), bool(value & 2), bool(value & 1)


def decode_control_byte(byte: int) -> KeyEvent | None:
    """Map a C0 control byte (or DEL) to its key event."""
    if byte in (0x0D, 0x0A):
        return KeyEvent("return")
    if byte == 0x09:
        return KeyEvent("tab")
    if byte == 0x7F:
        return KeyEvent("backspace")
    if byte == 0x00:
        return KeyEvent("space", ctrl=True)
    if 0x01 <= byte <= 0x1A:
        return KeyEvent(chr(0x60 + byte), ctrl=True)
    if byte == 0x1F:
        return KeyEvent("/", ctrl=True)
    return None


def _utf8_length(lead: int) -> int:
    if lead >= 0xF0:
        return 4
    if lead >= 0xE0:
        return 3
    if lead >= 0xC0:
        return 2
    return 1


def _read_csi(fd: int) -> KeyEvent:
    """Decode the remainder of an ``ESC [`` sequence."""
    params: list[bytes] = []
    while True:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return KeyEvent("escape")
        if part.isdigit() or part == b";":
            params.append(part)
            if len(params) > 16:
                return KeyEvent("escape")
            continue
        final = part
        break

    fields = b"".join(params).decode("ascii").split(";") if params else []
    ctrl = meta = shift = False
    if len(fields) >= 2:
        ctrl, meta, shift = _modifier_flags(fields[1])

    if final == b"~" and fields:
        name = _CSI_TILDE_KEYS.get(fields[0])
        if name is None:
            return KeyEvent("escape")
        return KeyEvent(name, ctrl=ctrl, meta=meta, shift=shift)
    if final == b"Z":
        return KeyEvent("tab", shift=True)
    name = _CSI_FINAL_KEYS.get(final)
    if name is None:
        return KeyEvent("escape")
    return KeyEvent(name, ctrl=ctrl, meta=meta, shift=shift)


def read_key(fd: int, timeout_ms: int | None = None) -> KeyEvent | None:
    """Read one key press from ``fd``.

    Returns ``None`` when ``timeout_ms`` elapses without input or on EOF.
    """
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return None
        ch = os.read(fd, 1)
        if not ch:
            return None

    byte = ch[0]
    if byte == 0x1B:
        seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if seq is None:
            return KeyEvent("escape")
        if seq in {b"[", b"O"}:
            return _read_csi(fd)
        if seq == b"\x1b":
            _PENDING_BYTES.append(seq)
            return KeyEvent("escape")
        inner = decode_control_byte(seq[0])
        if inner is not None:
            return KeyEvent(inner.key, ctrl=inner.ctrl, meta=True, shift=inner.shift)
        event = key_for_char(seq.decode("utf-8", errors="replace"))
        return KeyEvent(event.key, meta=True, shift=event.shift)

    control = decode_control_byte(byte)
    if control is not None:
        return control

    raw = ch
    for _ in range(_utf8_length(byte) - 1):
        more = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if more is None:
            break
        raw += more
    return key_for_char(raw.decode("utf-8", errors="replace"))


__all__ = [
    "ESC_SEQUENCE_TIMEOUT_MS",
    "decode_control_byte",
    "read_key",
]
