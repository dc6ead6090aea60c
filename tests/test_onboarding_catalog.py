# -*- coding: utf-8 -*-

from __future__ import annotations

import json
import shutil
import tempfile
import unittest
from pathlib import Path

from glyco.kvstore import MemoryKeyValueStore, get_json, set_json, user_key
from glyco.onboarding.answers import (
    ChoiceSetAnswer,
    FieldsAnswer,
    TextAnswer,
    answer_from_json,
    decode_answers,
    decode_history,
    encode_answers,
)
from glyco.onboarding.catalog import DEFAULT_CATALOG, QuestionKind, catalog_from_list, load_catalog
from glyco.onboarding.errors import CatalogError, OutOfRangeError


class TestDefaultCatalog(unittest.TestCase):
    def test_order_and_kinds(self) -> None:
        ids = [node.id for node in DEFAULT_CATALOG]
        self.assertEqual(len(ids), 12)
        self.assertEqual(ids[0], "identity")
        self.assertEqual(ids[-1], "regimeAlimentaire")
        self.assertEqual(DEFAULT_CATALOG.get("detailsPathologies").kind, QuestionKind.multi_select)
        self.assertEqual(DEFAULT_CATALOG.get("age").numeric_bounds.unit_suffix, "ans")

    def test_progress_never_decreases(self) -> None:
        progress = [node.progress_fraction for node in DEFAULT_CATALOG]
        self.assertEqual(progress, sorted(progress))
        self.assertTrue(all(0.0 <= p <= 1.0 for p in progress))


class TestCatalogLoading(unittest.TestCase):
    def test_accepts_mobile_client_shape(self) -> None:
        catalog = catalog_from_list(
            [
                {
                    "id": "goal",
                    "type": "selection",
                    "title": "Objectif",
                    "question": "Un objectif ?",
                    "progress": 0.1,
                    "options": [
                        {"label": "Oui", "value": "Oui"},
                        {"label": "Non", "value": "Non", "nextId": "end", "isFullWidth": True},
                    ],
                },
                {"id": "diet", "type": "selection", "isMultiSelect": True, "title": "", "question": "",
                 "options": [{"label": "Vegan", "value": "Vegan"}]},
                {"id": "end", "type": "input", "title": "", "question": "", "min": 1, "max": 10, "suffix": "kg"},
            ],
            strict=True,
        )
        self.assertEqual(catalog[0].kind, QuestionKind.single_select)
        self.assertEqual(catalog[1].kind, QuestionKind.multi_select)
        self.assertEqual(catalog[2].numeric_bounds.max, 10.0)
        self.assertEqual(catalog.jump_table(), {("goal", "Non"): "end"})
        self.assertTrue(catalog[0].choices[1].full_width)

    def test_rejects_duplicate_ids(self) -> None:
        node = {"id": "a", "kind": "numeric_input", "title": "", "prompt": ""}
        with self.assertRaises(CatalogError):
            catalog_from_list([node, dict(node)])

    def test_rejects_select_without_choices(self) -> None:
        with self.assertRaises(CatalogError):
            catalog_from_list([{"id": "a", "kind": "single_select", "title": "", "prompt": ""}])

    def test_rejects_unknown_kind(self) -> None:
        with self.assertRaises(CatalogError):
            catalog_from_list([{"id": "a", "kind": "slider", "title": "", "prompt": ""}])

    def test_load_from_file(self) -> None:
        tmp = Path(tempfile.mkdtemp(prefix="glyco-test-"))
        self.addCleanup(shutil.rmtree, tmp, True)
        fp = tmp / "catalog.json"
        fp.write_text(json.dumps(DEFAULT_CATALOG.to_list(), ensure_ascii=False), encoding="utf-8")

        catalog = load_catalog(fp, strict=True)
        self.assertEqual([n.id for n in catalog], [n.id for n in DEFAULT_CATALOG])
        self.assertEqual(catalog.jump_table(), DEFAULT_CATALOG.jump_table())

        with self.assertRaises(CatalogError):
            load_catalog(tmp / "missing.json")


class TestAnswerEncoding(unittest.TestCase):
    def test_json_shape_selects_variant(self) -> None:
        self.assertEqual(answer_from_json("35"), TextAnswer("35"))
        self.assertEqual(answer_from_json(["b", "a"]), ChoiceSetAnswer(("a", "b")))
        self.assertEqual(answer_from_json({"firstname": "Léa"}), FieldsAnswer({"firstname": "Léa"}))
        with self.assertRaises(ValueError):
            answer_from_json(42)

    def test_blob_keeps_accents(self) -> None:
        blob = encode_answers({"detailsPathologies": ChoiceSetAnswer(("Cholestérol",))})
        self.assertIn("Cholestérol", blob)
        self.assertEqual(decode_answers(blob)["detailsPathologies"], ChoiceSetAnswer(("Cholestérol",)))

    def test_bad_entries_are_dropped(self) -> None:
        with self.assertLogs("glyco.onboarding.answers", level="WARNING"):
            answers = decode_answers(json.dumps({"age": "35", "weird": 3}))
        self.assertEqual(answers, {"age": TextAnswer("35")})

    def test_history_blob(self) -> None:
        self.assertEqual(decode_history("[0, 1, 2]"), [0, 1, 2])
        for blob in ('{"a": 1}', '[0, "1"]', "[true]"):
            with self.assertRaises(ValueError):
                decode_history(blob)


class TestErrors(unittest.TestCase):
    def test_out_of_range_payload(self) -> None:
        err = OutOfRangeError("max", 250, "mg/dL")
        self.assertEqual(err.to_dict(), {"reason": "Maximum: 250 mg/dL", "bound": "max", "limit": 250, "unit": "mg/dL"})


class TestMemoryStore(unittest.TestCase):
    def test_json_helpers(self) -> None:
        store = MemoryKeyValueStore()
        key = user_key("user_app_settings", "u1")
        self.assertEqual(key, "user_app_settings_u1")
        self.assertEqual(get_json(store, key, {}), {})

        set_json(store, key, {"weight": "60-70"})
        self.assertEqual(get_json(store, key), {"weight": "60-70"})

        store.set(key, "{oops")
        with self.assertLogs("glyco.kvstore", level="WARNING"):
            self.assertIsNone(get_json(store, key))

        store.remove(key)
        self.assertIsNone(store.get(key))


if __name__ == "__main__":
    unittest.main()
