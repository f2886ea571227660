"""
import_engine.row_processor - Walk one tokenised line against the PAT
row grammar and produce a FieldMap.

    <row#>,SITE,<site>,USER,<user>,DATE,<date>,APP,<id>,<type>
        [,VISUAL,<P|F|value>]
        (,<KEY>,<params...>,<value>)*

The fixed prefix is checked literally; any mismatch raises RowError.
After it, each known KEY consumes a fixed number of tokens whatever
they contain.  Unknown keys consume nothing.
"""

from __future__ import annotations

from typing import Callable, Optional

from import_engine.errors import RowError
from import_engine.field_map import FieldMap
from import_engine.units import normalise_pass_fail, strip_units


class TokenCursor:
    """Forward-only view over a token list with explicit peek / advance."""

    def __init__(self, tokens: list[str]):
        self._tokens = tokens
        self._pos = 0

    def __bool__(self) -> bool:
        return self._pos < len(self._tokens)

    def peek(self) -> Optional[str]:
        if self._pos >= len(self._tokens):
            return None
        return self._tokens[self._pos]

    def next(self) -> Optional[str]:
        tok = self.peek()
        if tok is not None:
            self._pos += 1
        return tok

    def take(self) -> str:
        """Advance and return the token, or "" once the line is used up."""
        return self.next() or ""

    def skip(self, count: int = 1) -> None:
        for _ in range(count):
            self.next()


class RowParser:
    """
    Stateless between rows; one instance serves a whole import run.

    keep_non_visual_token
        The tester omits the VISUAL block in diagnostic mode.  By default
        the token found in its place is consumed and lost, exactly as the
        PAT desktop software did, so the first variable key of such a row
        is never seen.  Set this to leave that token in the stream.
    """

    def __init__(self, keep_non_visual_token: bool = False):
        self.keep_non_visual_token = keep_non_visual_token
        self._exact: dict[str, Callable[[TokenCursor, FieldMap], None]] = {
            "BOND":         self._bond,
            "SUBST":        self._subst,
            "CONTACT":      self._contact,
            "LOAD VA":      self._load_va,
            "LOAD CURRENT": self._load_current,
            "LEAKAGE":      self._leakage,
            "IEC FUSE":     self._iec_fuse,
            "IEC BOND":     self._iec_bond,
            "IEC INSU":     self._iec_insu,
            "NOTE":         self._note,
        }
        self._prefixed: tuple[tuple[str, Callable[[TokenCursor, FieldMap], None]], ...] = (
            ("INSU", self._insu),
            ("RCD",  self._rcd),
        )

    def parse(self, tokens: list[str]) -> FieldMap:
        """Return the FieldMap for one line.  Raises RowError on a bad prefix."""
        cur = TokenCursor(tokens)
        cur.skip()                              # row sequence number
        data = FieldMap()

        self._expect(cur, "SITE")
        data.site = cur.take().strip()
        self._expect(cur, "USER")
        data.user = cur.take().strip()
        self._expect(cur, "DATE")
        data.test_date = cur.take().strip()
        self._expect(cur, "APP")

        data.asset_id = pad_asset_id(cur.take().strip())
        data.test_type = cur.take().strip()

        self._visual(cur, data)

        while cur:
            key = cur.take().strip()
            if not key:
                continue
            handler = self._dispatch(key)
            if handler is not None:
                handler(cur, data)

        return data

    # ── Grammar helpers ────────────────────────────────────────────────

    @staticmethod
    def _expect(cur: TokenCursor, literal: str) -> None:
        tok = cur.next()
        if tok is None or tok.strip() != literal:
            found = "end of line" if tok is None else repr(tok.strip())
            raise RowError(f"Expected {literal}, found {found}")

    def _visual(self, cur: TokenCursor, data: FieldMap) -> None:
        tok = cur.peek()
        is_visual = tok is not None and tok.strip() == "VISUAL"
        if is_visual or not self.keep_non_visual_token:
            cur.skip()
        if is_visual:
            data.visual_result = normalise_pass_fail(cur.take())

    def _dispatch(self, key: str):
        handler = self._exact.get(key)
        if handler is not None:
            return handler
        for prefix, fn in self._prefixed:
            if key.startswith(prefix):
                return fn
        return None

    # ── Field handlers ─────────────────────────────────────────────────
    # Each consumes its tokens first, then decides whether to store.

    @staticmethod
    def _bond(cur: TokenCursor, data: FieldMap) -> None:
        cur.skip(2)                             # range (HIGH/LOW), channel
        data.set_once("bond_result", strip_units(cur.take()))

    @staticmethod
    def _insu(cur: TokenCursor, data: FieldMap) -> None:
        insu_class = cur.take()                 # I or II
        cur.skip()                              # channel
        val = cur.take()
        if data.set_once("insulation_result", strip_units(val)):
            data.insu_class = insu_class.strip()

    @staticmethod
    def _subst(cur: TokenCursor, data: FieldMap) -> None:
        insu_class = cur.take()
        val = cur.take()
        if data.substitute_leakage is not None:
            return
        stripped = strip_units(val)
        if stripped:
            data.substitute_leakage = stripped
        if not data.insu_class:
            data.insu_class = insu_class.strip()

    @staticmethod
    def _contact(cur: TokenCursor, data: FieldMap) -> None:
        cur.skip()                              # channel
        _set_reading(data, "touch_current", cur.take())

    @staticmethod
    def _load_va(cur: TokenCursor, data: FieldMap) -> None:
        _set_reading(data, "load_va", cur.take())

    @staticmethod
    def _load_current(cur: TokenCursor, data: FieldMap) -> None:
        _set_reading(data, "load_current", cur.take())

    @staticmethod
    def _leakage(cur: TokenCursor, data: FieldMap) -> None:
        _set_reading(data, "earth_leakage", cur.take())

    @staticmethod
    def _iec_fuse(cur: TokenCursor, data: FieldMap) -> None:
        data.set_once("iec_fuse", normalise_pass_fail(cur.take()))

    @staticmethod
    def _iec_bond(cur: TokenCursor, data: FieldMap) -> None:
        data.set_once("iec_bond", normalise_pass_fail(strip_units(cur.take())))

    @staticmethod
    def _iec_insu(cur: TokenCursor, data: FieldMap) -> None:
        data.set_once("iec_insu", normalise_pass_fail(strip_units(cur.take())))

    @staticmethod
    def _rcd(cur: TokenCursor, data: FieldMap) -> None:
        cur.skip()                              # angle, e.g. "0 DEG"
        _set_reading(data, "rcd_trip", cur.take())

    @staticmethod
    def _note(cur: TokenCursor, data: FieldMap) -> None:
        val = cur.take().strip()
        if val:
            data.set_once("note", val)


def pad_asset_id(raw: str) -> str:
    """Zero-pad all-digit identifiers to 4 places ("7" → "0007")."""
    if raw and raw.isascii() and raw.isdigit():
        return f"{int(raw):04d}"
    return raw


def has_usable_asset_id(asset_id: Optional[str]) -> bool:
    """An identifier is usable when it holds at least one letter or digit."""
    return bool(asset_id) and any(ch.isalnum() for ch in asset_id)


def _set_reading(data: FieldMap, name: str, raw: str) -> None:
    """Unit-strip and store, skipping empty readings."""
    if getattr(data, name) is not None:
        return
    stripped = strip_units(raw)
    if stripped:
        setattr(data, name, stripped)
