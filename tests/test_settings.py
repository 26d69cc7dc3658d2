"""
Tests for the settings store (mindease/settings.py) and the /settings API endpoints.
"""

from __future__ import annotations

import json

import mindease.settings as settings_mod
from mindease.settings import (
    DEFAULTS,
    focus_duration_seconds,
    get_settings,
    short_break_duration_seconds,
    update_settings,
)


# ── Unit tests: settings store ────────────────────────────────────────────────

class TestSettingsDefaults:
    def test_get_settings_returns_all_defaults(self, tmp_settings_file):
        s = get_settings()
        for key, val in DEFAULTS.items():
            assert s[key] == val

    def test_get_settings_returns_copy(self, tmp_settings_file):
        s1 = get_settings()
        s1["focus_duration_minutes"] = 9999
        assert get_settings()["focus_duration_minutes"] == DEFAULTS["focus_duration_minutes"]

    def test_defaults_contain_expected_keys(self):
        assert set(DEFAULTS) == {"focus_duration_minutes", "short_break_duration_minutes"}

    def test_duration_helpers(self, tmp_settings_file):
        assert focus_duration_seconds() == 25 * 60
        assert short_break_duration_seconds() == 5 * 60


class TestUpdateSettings:
    def test_update_single_key(self, tmp_settings_file):
        update_settings({"focus_duration_minutes": 45})
        assert get_settings()["focus_duration_minutes"] == 45
        assert focus_duration_seconds() == 45 * 60

    def test_update_persists_to_disk(self, tmp_settings_file):
        update_settings({"short_break_duration_minutes": 10})
        saved = json.loads(tmp_settings_file.read_text())
        assert saved["short_break_duration_minutes"] == 10

    def test_unknown_keys_are_ignored(self, tmp_settings_file):
        update_settings({"unknown_key": "surprise", "focus_duration_minutes": 30})
        s = get_settings()
        assert "unknown_key" not in s
        assert s["focus_duration_minutes"] == 30

    def test_update_coerces_type(self, tmp_settings_file):
        update_settings({"focus_duration_minutes": 30.9})
        assert get_settings()["focus_duration_minutes"] == 30

    def test_zero_falls_back_to_default_duration(self, tmp_settings_file):
        update_settings({"short_break_duration_minutes": 0})
        assert short_break_duration_seconds() == DEFAULTS["short_break_duration_minutes"] * 60

    def test_load_from_existing_file(self, tmp_settings_file):
        tmp_settings_file.write_text(json.dumps({"focus_duration_minutes": 50}))
        settings_mod._current.clear()
        s = get_settings()
        assert s["focus_duration_minutes"] == 50
        assert s["short_break_duration_minutes"] == DEFAULTS["short_break_duration_minutes"]

    def test_malformed_file_falls_back_to_defaults(self, tmp_settings_file):
        tmp_settings_file.write_text("not valid json{{")
        settings_mod._current.clear()
        assert get_settings() == DEFAULTS


# ── API integration tests ────────────────────────────────────────────────────

class TestSettingsEndpoints:
    async def test_get_settings_response_shape(self, client):
        r = await client.get("/settings")
        assert r.status_code == 200
        body = r.json()
        assert body["defaults"] == DEFAULTS
        assert set(body["settings"]) == set(DEFAULTS)

    async def test_put_updates_focus_duration(self, client):
        r = await client.put("/settings", json={"focus_duration_minutes": 40})
        assert r.status_code == 200
        assert r.json()["settings"]["focus_duration_minutes"] == 40

    async def test_put_empty_body_returns_200(self, client):
        r = await client.put("/settings", json={})
        assert r.status_code == 200

    async def test_put_focus_below_minimum_returns_422(self, client):
        r = await client.put("/settings", json={"focus_duration_minutes": 1})
        assert r.status_code == 422

    async def test_put_break_above_maximum_returns_422(self, client):
        r = await client.put("/settings", json={"short_break_duration_minutes": 120})
        assert r.status_code == 422

    async def test_new_duration_applies_to_next_timer(self, client):
        await client.put("/settings", json={"focus_duration_minutes": 50})
        r = await client.post("/timers/focus/start", json={"task_id": "t1"})
        assert r.json()["focus"]["duration_seconds"] == 50 * 60
