import os
import pathlib
import tempfile
import unittest
from unittest.mock import patch

import set_env_vars
from quest.config import DEFAULT_MODEL, MISSING_KEY_MESSAGE, QuestConfig


class TestQuestConfig(unittest.TestCase):
    def test_defaults(self):
        cfg = QuestConfig.from_env({})
        self.assertIsNone(cfg.gemini_api_key)
        self.assertEqual(cfg.gemini_model, DEFAULT_MODEL)
        self.assertEqual(cfg.timeout_s, 60.0)
        self.assertEqual(cfg.credential_error(), MISSING_KEY_MESSAGE)

    def test_reads_env(self):
        cfg = QuestConfig.from_env(
            {
                "GOOGLE_API_KEY": " abc ",
                "GEMINI_MODEL": "gemini-pro",
                "GEMINI_BASE_URL": "http://localhost:9000/v1/",
                "GEMINI_TIMEOUT_S": "0",
                "QUEST_TEMPERATURE": "0.3",
                "QUEST_MAX_OUTPUT_TOKENS": "not-a-number",
                "QUEST_MAX_SESSIONS": "25",
            }
        )
        self.assertEqual(cfg.max_sessions, 25)
        self.assertEqual(cfg.gemini_api_key, "abc")
        self.assertEqual(cfg.gemini_model, "gemini-pro")
        self.assertEqual(cfg.base_url, "http://localhost:9000/v1")
        self.assertIsNone(cfg.timeout_s)
        self.assertEqual(cfg.temperature, 0.3)
        self.assertEqual(cfg.max_output_tokens, 8192)
        self.assertIsNone(cfg.credential_error())

    def test_placeholder_key_rejected(self):
        cfg = QuestConfig.from_env({"GEMINI_API_KEY": "your-api-key-here"})
        self.assertEqual(cfg.credential_error(), MISSING_KEY_MESSAGE)

    def test_redacted_hides_key(self):
        cfg = QuestConfig(gemini_api_key="secret")
        self.assertNotIn("secret", str(cfg.redacted()))


class TestSetEnvVars(unittest.TestCase):
    def setUp(self):
        patcher = patch.object(set_env_vars, "_resolve_repo_root", return_value=pathlib.Path("/nonexistent"))
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_parse_dotenv(self):
        parsed = set_env_vars._parse_dotenv(
            "# comment\nGEMINI_API_KEY='abc'\nexport GEMINI_MODEL=\"flash\"\nnot a pair\n=novalue\n"
        )
        self.assertEqual(parsed, {"GEMINI_API_KEY": "abc", "GEMINI_MODEL": "flash"})

    def test_initialize_from_file(self):
        with tempfile.TemporaryDirectory() as td:
            env_path = pathlib.Path(td) / "custom.env"
            env_path.write_text("GEMINI_API_KEY=from-file\nUNRELATED=1\n", encoding="utf-8")
            with patch.dict(os.environ, {}, clear=True):
                status = set_env_vars.initialize_env_vars(dotenv_paths=[str(env_path)])
                self.assertTrue(status["gemini_api_key_set"])
                self.assertEqual(os.environ["GEMINI_API_KEY"], "from-file")
                self.assertNotIn("UNRELATED", os.environ)

    def test_existing_env_wins(self):
        with tempfile.TemporaryDirectory() as td:
            env_path = pathlib.Path(td) / "custom.env"
            env_path.write_text("GEMINI_API_KEY=from-file\n", encoding="utf-8")
            with patch.dict(os.environ, {"GEMINI_API_KEY": "from-shell"}, clear=True):
                set_env_vars.initialize_env_vars(dotenv_paths=[str(env_path)])
                self.assertEqual(os.environ["GEMINI_API_KEY"], "from-shell")
                set_env_vars.initialize_env_vars(dotenv_paths=[str(env_path)], override_existing=True)
                self.assertEqual(os.environ["GEMINI_API_KEY"], "from-file")

    def test_more_specific_file_wins(self):
        with tempfile.TemporaryDirectory() as td:
            root = pathlib.Path(td)
            (root / ".env").write_text("GEMINI_API_KEY=base\nGEMINI_MODEL=base-model\n", encoding="utf-8")
            (root / ".env.local").write_text("GEMINI_API_KEY=local\n", encoding="utf-8")
            extra = root / "extra.env"
            extra.write_text("GEMINI_MODEL=extra-model\n", encoding="utf-8")

            with patch.object(set_env_vars, "_resolve_repo_root", return_value=root):
                with patch.dict(os.environ, {}, clear=True):
                    set_env_vars.initialize_env_vars()
                    self.assertEqual(os.environ["GEMINI_API_KEY"], "local")
                    self.assertEqual(os.environ["GEMINI_MODEL"], "base-model")

                with patch.dict(os.environ, {}, clear=True):
                    set_env_vars.initialize_env_vars(dotenv_paths=[str(extra)])
                    self.assertEqual(os.environ["GEMINI_API_KEY"], "local")
                    self.assertEqual(os.environ["GEMINI_MODEL"], "extra-model")

    def test_google_key_alias(self):
        with patch.dict(os.environ, {"GOOGLE_API_KEY": "g-key"}, clear=True):
            set_env_vars.initialize_env_vars()
            self.assertEqual(os.environ["GEMINI_API_KEY"], "g-key")


if __name__ == "__main__":
    unittest.main()
