"""Manual corrections and rule learning for a cleaning session."""

from __future__ import annotations

import logging
from typing import Callable

from sheet_cleaner.exceptions import (
    AliasStoreError,
    DictionaryError,
    PromotionError,
    SelectionError,
    UnsupportedModeError,
)
from sheet_cleaner.matching.engine import classify, match_size, parse_price
from sheet_cleaner.matching.repository import fold
from sheet_cleaner.schema import CleaningMode, ModeResult, ParsedRow, PromotionResult
from sheet_cleaner.session import CleaningSession, check_mode

logger = logging.getLogger(__name__)


class ReconciliationController:
    """Applies operator corrections to rows and learns rules from them.

    Every dictionary change is followed by a propagation pass over the whole
    row collection so that rows with equivalent raw text resolve together.
    """

    def __init__(self, session: CleaningSession):
        self.session = session

    def edit(self, mode: CleaningMode, row_id: str, value: str | None) -> ParsedRow:
        """Replace a row's value with a typed or dropped-in value."""
        self._begin(mode)
        row = self.session.row(row_id)
        self._apply_edit(mode, row.result(mode), value)
        return row

    def edit_group(self, mode: CleaningMode, target_text: str, value: str | None) -> list[str]:
        """Apply the same edit to every row carrying exactly ``target_text``."""
        self._begin(mode)
        updated: list[str] = []
        for row in self.session.rows:
            result = row.results.get(mode)
            if result is None or result.target_text != target_text:
                continue
            self._apply_edit(mode, result, value)
            updated.append(row.id)
        return updated

    def select_span(self, mode: CleaningMode, row_id: str, text: str | None) -> ParsedRow:
        """Use a highlighted part of the raw text as the row's value."""
        self._begin(mode)
        if mode == "PRICE":
            raise UnsupportedModeError("text selection is not available for prices")
        row = self.session.row(row_id)
        result = row.result(mode)
        selected = (text or "").strip()
        if not selected:
            raise SelectionError("selection is empty")
        if selected not in result.target_text:
            raise SelectionError(f"{selected!r} is not part of row {row_id}")

        result.extracted_value = selected
        result.selection_source = selected
        result.manual_override = True
        result.status = classify(mode, selected, self.session.dictionaries)
        return row

    def promote(self, mode: CleaningMode, row_id: str) -> PromotionResult:
        """Turn a row's correction into a dictionary rule and propagate it."""
        self._begin(mode)
        if mode == "PRICE":
            raise UnsupportedModeError("prices are parsed, not learned")
        row = self.session.row(row_id)
        result = row.result(mode)
        eligible = result.status == "NEW" or (result.status == "MATCHED" and result.manual_override)
        if not eligible:
            raise PromotionError(f"row {row_id} has no correction to learn")

        if mode == "NAME":
            return self._promote_name(result)
        return self._promote_size(
            result.extracted_value,
            selection_source=result.selection_source,
            target_text=result.target_text,
        )

    def add_size(self, label: str) -> PromotionResult:
        """Add a size label by hand and propagate it."""
        self.session.require_mutable()
        return self._promote_size(label, selection_source=None, target_text=label)

    def rename_size(self, old_label: str, new_label: str) -> list[str]:
        """Rename a known size locally and relabel the rows carrying it."""
        self.session.require_mutable()
        try:
            known = self.session.dictionaries.size.rename(old_label, new_label)
        except KeyError:
            raise DictionaryError(f"unknown size: {old_label}") from None
        except ValueError as exc:
            raise DictionaryError(str(exc)) from exc

        updated: list[str] = []
        for row in self.session.rows:
            result = row.results.get("SIZE")
            if result is not None and fold(result.extracted_value) == fold(old_label):
                result.extracted_value = known.label
                updated.append(row.id)
        return updated

    def remove_size(self, label: str) -> list[str]:
        """Forget a size locally; rows matched to it need review again."""
        self.session.require_mutable()
        if not self.session.dictionaries.size.remove(label):
            raise DictionaryError(f"unknown size: {label}")

        updated: list[str] = []
        for row in self.session.rows:
            result = row.results.get("SIZE")
            if result is None or result.status != "MATCHED":
                continue
            if fold(result.extracted_value) == fold(label):
                result.status = "NEW"
                updated.append(row.id)
        return updated

    def _apply_edit(self, mode: CleaningMode, result: ModeResult, value: str | None) -> None:
        text = value or ""
        if mode == "PRICE":
            text = parse_price(text) or text
        result.extracted_value = text or None
        result.manual_override = True
        result.status = classify(mode, text, self.session.dictionaries)

    def _promote_name(self, result: ModeResult) -> PromotionResult:
        dictionaries = self.session.dictionaries
        label = (result.extracted_value or "").strip()
        alias_text = result.target_text
        if not label:
            return PromotionResult(mode="NAME", dictionary_version=dictionaries.name.version)

        if not alias_text.strip():
            raise PromotionError("row has no raw text to learn from")

        dictionaries.name.add_alias(alias_text, label)
        persisted = self._persist(
            lambda store: store.create_product_alias(alias_text, label),
            learned=f'"{alias_text}" -> "{label}"',
        )

        updated: list[str] = []
        for row in self.session.rows:
            other = row.results.get("NAME")
            if other is None or other.target_text != alias_text:
                continue
            other.extracted_value = label
            other.status = "MATCHED"
            updated.append(row.id)

        return PromotionResult(
            mode="NAME",
            label=label,
            alias_text=alias_text,
            updated_row_ids=updated,
            persisted=persisted,
            dictionary_version=dictionaries.name.version,
        )

    def _promote_size(
        self,
        value: str | None,
        *,
        selection_source: str | None,
        target_text: str,
    ) -> PromotionResult:
        sizes = self.session.dictionaries.size
        label = (value or "").strip()
        if not label:
            return PromotionResult(mode="SIZE", dictionary_version=sizes.version)

        matchers = [selection_source] if selection_source and fold(selection_source) != fold(label) else []
        known, added = sizes.add(label, matchers)
        assert known is not None
        label = known.label

        alias_text = selection_source or target_text
        persisted = True
        if alias_text and fold(alias_text) != fold(label):
            persisted = self._persist(
                lambda store: store.create_size_alias(alias_text, label),
                learned=f'"{alias_text}" = "{label}"',
            )
        persisted = self._persist(lambda store: store.create_size(label)) and persisted

        updated = self._propagate_size(label, target_text)
        logger.info("learned size %s (+%d matchers), %d rows updated", label, len(added), len(updated))
        return PromotionResult(
            mode="SIZE",
            label=label,
            alias_text=alias_text or None,
            added_matchers=added,
            updated_row_ids=updated,
            persisted=persisted,
            dictionary_version=sizes.version,
        )

    def _propagate_size(self, label: str, source_text: str) -> list[str]:
        """Re-evaluate every SIZE row after the dictionary learned ``label``.

        Rows already matched to another label are left alone.
        """
        sizes = self.session.dictionaries.size
        updated: list[str] = []
        for row in self.session.rows:
            result = row.results.get("SIZE")
            if result is None:
                continue
            before = (result.extracted_value, result.status)

            if result.extracted_value == label:
                result.status = "MATCHED"
            elif result.status == "NEW" and fold(result.extracted_value) == fold(label):
                result.extracted_value = label
                result.status = "MATCHED"
            elif result.status == "MATCHED":
                pass
            elif source_text and result.target_text == source_text and not result.manual_override:
                result.extracted_value = label
                result.status = "MATCHED"
            elif result.status == "UNKNOWN" or not result.extracted_value or not result.manual_override:
                extraction = match_size(result.target_text, sizes)
                if extraction.status == "MATCHED":
                    result.extracted_value = extraction.value
                    result.status = "MATCHED"

            if (result.extracted_value, result.status) != before:
                updated.append(row.id)
        return updated

    def _persist(self, write: Callable, *, learned: str | None = None) -> bool:
        store = self.session.store
        if store is None:
            return False
        try:
            write(store)
        except AliasStoreError as exc:
            logger.warning("rule not saved: %s", exc)
            self.session.notify("warning", "rule_not_saved", "Failed to save rule; it applies to this file only.")
            return False
        if learned:
            self.session.notify("info", "rule_learned", f"Learned: {learned}")
        return True

    def _begin(self, mode: CleaningMode) -> None:
        self.session.require_mutable()
        check_mode(mode)
