import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from pydantic import ValidationError

from vetcatalog import env
from vetcatalog.settings import DEV_JWT_SECRET, Settings


class GetSecretTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.env_file = Path(self.tmp.name) / ".env"
        self.env_file.write_text("VC_FROM_FILE=file-value\nvc_lower=lower-value\nVC_SHADOWED=file\n")
        env.clear_cache()

    def tearDown(self) -> None:
        env.clear_cache()
        self.tmp.cleanup()

    def environ(self, **values):
        values["VETCATALOG_ENV_FILE"] = str(self.env_file)
        return mock.patch.dict(os.environ, values)

    def test_environment_wins_over_prefix_and_file(self) -> None:
        with self.environ(VC_SHADOWED="plain", VETCATALOG_VC_SHADOWED="prefixed"):
            self.assertEqual(env.get_secret("VC_SHADOWED"), "plain")

    def test_prefixed_variable_is_used(self) -> None:
        with self.environ(VETCATALOG_VC_ONLY_PREFIXED="prefixed"):
            self.assertEqual(env.get_secret("vc_only_prefixed"), "prefixed")

    def test_dotenv_file_fallback(self) -> None:
        with self.environ():
            self.assertEqual(env.get_secret("VC_FROM_FILE"), "file-value")
            self.assertEqual(env.get_secret("VC_LOWER"), "lower-value")

    def test_default_and_cache(self) -> None:
        with self.environ():
            self.assertEqual(env.get_secret("VC_MISSING", "fallback"), "fallback")
        with self.environ(VC_MISSING="late"):
            # misses are cached until clear_cache()
            self.assertIsNone(env.get_secret("VC_MISSING"))
            env.clear_cache()
            self.assertEqual(env.get_secret("VC_MISSING"), "late")


class SettingsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.env_file = Path(self.tmp.name) / ".env"
        self.env_file.write_text("DATABASE_URL=sqlite:///from-file.sqlite\nMEDIA_URL=/files/\n")

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_from_env_layers_environment_prefix_and_file(self) -> None:
        values = {
            "VETCATALOG_ENV_FILE": str(self.env_file),
            "VETCATALOG_JWT_EXPIRES_MINUTES": "15",
            "CORS_ORIGINS": "https://a.test, https://b.test",
            "STORAGE_BACKEND": "S3",
            "JWT_SECRET": "from-env",
        }
        with mock.patch.dict(os.environ, values):
            settings = Settings.from_env()
        self.assertEqual(settings.jwt_expires_minutes, 15)
        self.assertEqual(settings.cors_origins, ["https://a.test", "https://b.test"])
        self.assertEqual(settings.storage_backend, "s3")
        self.assertEqual(settings.jwt_secret, "from-env")
        self.assertEqual(settings.database_url, "sqlite:///from-file.sqlite")
        self.assertEqual(settings.media_url, "/files")

    def test_invalid_values_fail_loudly(self) -> None:
        with mock.patch.dict(os.environ, {"JWT_EXPIRES_MINUTES": "soon"}):
            with self.assertRaises(ValidationError):
                Settings()
        with self.assertRaises(ValidationError):
            Settings(jwt_expires_minutes=0)

    def test_defaults(self) -> None:
        settings = Settings(database_url="sqlite://")
        self.assertEqual(settings.jwt_secret, DEV_JWT_SECRET)
        self.assertEqual(settings.cors_origins, ["*"])
        self.assertEqual(settings.storage_backend, "local")


if __name__ == "__main__":
    unittest.main()
