# -*- coding: utf-8 -*-

from __future__ import annotations

import os
import shutil
import sys
import tempfile
import time
import unittest
from pathlib import Path
from unittest import mock

from fastapi.testclient import TestClient


class TestOnboardingApi(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="glyco-test-"))
        data_root = cls._tmp / "data"
        os.environ["GLYCO_DATA_ROOT"] = str(data_root)
        os.environ["GLYCO_DB_PATH"] = str(data_root / "glyco.db")
        os.environ["GLYCO_JWT_SECRET"] = "test-secret"
        os.environ.pop("GLYCO_UPLOAD_DIR", None)
        os.environ.pop("GLYCO_CATALOG_PATH", None)

        # Ensure settings/app reflect the env vars above.
        for name in list(sys.modules.keys()):
            if name == "glyco" or name.startswith("glyco."):
                sys.modules.pop(name, None)

        from glyco.api import app  # noqa: WPS433 (import inside test for env control)

        cls.app = app
        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls) -> None:
        from glyco.onboarding.sessions import get_registry  # noqa: WPS433

        get_registry().persistence.writer.shutdown()
        cls.client.close()
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def _register(self, email: str, name: str = "Camille") -> tuple[str, dict]:
        resp = self.client.post("/api/auth/register", json={"name": name, "email": email, "password": "password123"})
        self.assertEqual(resp.status_code, 200, resp.text)
        body = resp.json()
        return body["user"]["id"], {"Authorization": f"Bearer {body['token']}"}

    def _answer(self, headers: dict, value) -> dict:
        resp = self.client.post("/api/onboarding/answer", json={"value": value}, headers=headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()

    def test_auth_required(self) -> None:
        unauth = TestClient(self.app)
        self.assertEqual(unauth.get("/api/onboarding").status_code, 401)
        self.assertEqual(unauth.post("/api/onboarding/answer", json={"value": "x"}).status_code, 401)
        unauth.close()

    def test_catalog(self) -> None:
        _, headers = self._register("catalog@example.com")
        resp = self.client.get("/api/onboarding/catalog", headers=headers)
        self.assertEqual(resp.status_code, 200)
        nodes = resp.json()
        self.assertEqual(len(nodes), 12)
        self.assertEqual(nodes[6]["choices"][1]["jump_to_id"], "AutresPathologies")

    def test_full_flow(self) -> None:
        user_id, headers = self._register("flow@example.com")

        state = self.client.get("/api/onboarding", headers=headers).json()
        self.assertEqual(state["node"]["id"], "identity")
        self.assertEqual(state["history_length"], 1)
        self.assertIsNone(state["value"])

        state = self._answer(headers, {"firstname": "Camille", "lastname": "Dupont"})
        self.assertEqual(state["node"]["id"], "genre")
        self._answer(headers, "Femme")

        resp = self.client.post("/api/onboarding/answer", json={"value": "17"}, headers=headers)
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json()["detail"]["reason"], "Minimum: 18 ans")
        self.assertEqual(resp.json()["detail"]["bound"], "min")

        resp = self.client.post("/api/onboarding/answer", json={"value": ""}, headers=headers)
        self.assertEqual(resp.status_code, 422)

        self._answer(headers, 35)
        self._answer(headers, "170,5")
        self._answer(headers, "60-70")
        self._answer(headers, "110")
        state = self._answer(headers, "Non")
        self.assertEqual(state["node"]["id"], "AutresPathologies")

        resp = self.client.post("/api/onboarding/back", headers=headers)
        self.assertEqual(resp.json()["status"], "ok")
        self.assertEqual(resp.json()["node"]["id"], "glycemieObjective")
        self.assertEqual(self.client.get("/api/onboarding", headers=headers).json()["value"], "Non")
        self._answer(headers, "Oui")
        self._answer(headers, "140")
        self._answer(headers, "Oui")

        resp = self.client.post("/api/onboarding/toggle", json={"value": "Hypertension"}, headers=headers)
        self.assertEqual(resp.json()["selected"], ["Hypertension"])
        resp = self.client.post("/api/onboarding/toggle", json={"value": "Non"}, headers=headers)
        self.assertEqual(resp.json()["selected"], ["Non"])
        resp = self.client.post("/api/onboarding/toggle", json={"value": "Cholestérol"}, headers=headers)
        self.assertEqual(resp.json()["selected"], ["Cholestérol"])

        self.assertEqual(self.client.post("/api/onboarding/complete", headers=headers).status_code, 409)

        state = self._answer(headers, None)
        self.assertEqual(state["node"]["id"], "activitePhysique")
        self._answer(headers, "Moyen")
        state = self._answer(headers, ["Vegan"])
        self.assertTrue(state["is_terminal"])

        resp = self.client.post("/api/onboarding/complete", headers=headers)
        self.assertEqual(resp.status_code, 200)
        answers = resp.json()["answers"]
        self.assertEqual(answers["identity"], {"firstname": "Camille", "lastname": "Dupont"})
        self.assertEqual(answers["taille"], "170.5")
        self.assertEqual(answers["detailsPathologies"], ["Cholestérol"])

        from glyco.kvstore import get_json, get_store  # noqa: WPS433

        self.assertEqual(get_json(get_store(), f"user_onboarding_answers_{user_id}"), answers)

        state = self.client.get("/api/onboarding", headers=headers).json()
        self.assertEqual(state["node"]["id"], "identity")

    def test_session_survives_restart(self) -> None:
        user_id, headers = self._register("restart@example.com")
        self._answer(headers, {"firstname": "Léa", "lastname": "Martin"})
        self._answer(headers, "Homme")

        from glyco.onboarding.sessions import get_registry  # noqa: WPS433

        registry = get_registry()
        registry.persistence.flush()
        registry.discard(user_id)
        self.assertNotIn(user_id, registry)

        state = self.client.get("/api/onboarding", headers=headers).json()
        self.assertEqual(state["node"]["id"], "age")
        self.assertEqual(state["history_length"], 3)

    def test_finished_session_completes_after_restart(self) -> None:
        user_id, headers = self._register("finished@example.com")
        identity = {"firstname": "Yan", "lastname": "Roux"}
        for value in (identity, "Homme", 40, "180", "80-90", "120", "Non", "Non", "Faible"):
            self._answer(headers, value)
        self.assertTrue(self._answer(headers, ["Coeliaque"])["is_terminal"])

        from glyco.onboarding.sessions import get_registry  # noqa: WPS433

        registry = get_registry()
        registry.persistence.flush()
        registry.discard(user_id)

        self.assertTrue(self.client.get("/api/onboarding", headers=headers).json()["is_terminal"])
        resp = self.client.post("/api/onboarding/complete", headers=headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["answers"]["regimeAlimentaire"], ["Coeliaque"])

    def test_reset_and_exit(self) -> None:
        _, headers = self._register("reset@example.com")
        resp = self.client.post("/api/onboarding/back", headers=headers)
        self.assertEqual(resp.json(), {"status": "exit_requested", "node": None})

        self._answer(headers, {"firstname": "Noé", "lastname": "Petit"})
        state = self.client.post("/api/onboarding/reset", headers=headers).json()
        self.assertEqual(state["node"]["id"], "identity")
        self.assertEqual(state["history_length"], 1)

    def test_toggle_on_single_select_is_rejected(self) -> None:
        _, headers = self._register("toggle@example.com")
        resp = self.client.post("/api/onboarding/toggle", json={"value": "Hypertension"}, headers=headers)
        self.assertEqual(resp.status_code, 422)


class TestAuthApi(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="glyco-test-"))
        data_root = cls._tmp / "data"
        os.environ["GLYCO_DATA_ROOT"] = str(data_root)
        os.environ["GLYCO_DB_PATH"] = str(data_root / "glyco.db")
        os.environ["GLYCO_JWT_SECRET"] = "test-secret"

        for name in list(sys.modules.keys()):
            if name == "glyco" or name.startswith("glyco."):
                sys.modules.pop(name, None)

        from glyco.api import app  # noqa: WPS433

        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls) -> None:
        cls.client.close()
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def test_register_login_me(self) -> None:
        resp = self.client.post(
            "/api/auth/register", json={"name": "Alex", "email": "  Alex@Example.com ", "password": "password123"}
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["user"]["email"], "alex@example.com")

        resp = self.client.post(
            "/api/auth/register", json={"name": "Alex", "email": "alex@example.com", "password": "password123"}
        )
        self.assertEqual(resp.status_code, 400)

        resp = self.client.post("/api/auth/login", json={"email": "ALEX@example.com", "password": "wrong-pass"})
        self.assertEqual(resp.status_code, 401)

        resp = self.client.post("/api/auth/login", json={"email": "ALEX@example.com", "password": "password123"})
        self.assertEqual(resp.status_code, 200)
        token = resp.json()["token"]

        resp = self.client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["name"], "Alex")

        resp = self.client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.token"})
        self.assertEqual(resp.status_code, 401)

    def test_token_checks(self) -> None:
        from glyco.auth.security import hash_password, issue_token, token_subject, verify_password  # noqa: WPS433
        from fastapi import HTTPException  # noqa: WPS433

        stored = hash_password("password123")
        self.assertTrue(stored.startswith("pbkdf2_sha256$"))
        self.assertTrue(verify_password("password123", stored))
        self.assertFalse(verify_password("password124", stored))
        self.assertFalse(verify_password("password123", "plain-text"))

        token = issue_token("user-1")
        self.assertEqual(token_subject(token), "user-1")

        header, _, signature = token.split(".")
        forged = issue_token("user-2").split(".")[1]
        with self.assertRaises(HTTPException) as ctx:
            token_subject(f"{header}.{forged}.{signature}")
        self.assertEqual(ctx.exception.detail, "Invalid token")

        with mock.patch("glyco.auth.security.time.time", return_value=time.time() + 400 * 86400):
            with self.assertRaises(HTTPException) as ctx:
                token_subject(token)
        self.assertEqual(ctx.exception.detail, "Token expired")

    def test_cookie_session(self) -> None:
        resp = self.client.post(
            "/api/auth/register", json={"name": "Cookie", "email": "cookie@example.com", "password": "password123"}
        )
        token = resp.json()["token"]
        fresh = TestClient(self.client.app, cookies={"glyco_token": token})
        self.assertEqual(fresh.get("/api/auth/me").json()["email"], "cookie@example.com")
        fresh.close()

    def test_health_is_public(self) -> None:
        from glyco.api import app  # noqa: WPS433

        unauth = TestClient(app)
        self.assertEqual(unauth.get("/api/health").json(), {"status": "ok"})
        unauth.close()


if __name__ == "__main__":
    unittest.main()
