import logging
import os
import sys

import pytest

from core import logging as lens_logging
from core.constants import AppConstants

class TestLogDirectory:

    def test_xdg_data_home(self, monkeypatch, tmp_path):
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
        assert lens_logging.get_log_directory() == os.path.join(str(tmp_path), AppConstants.APP_NAME)

    def test_windows_without_appdata_falls_back_to_home(self, monkeypatch, tmp_path):
        monkeypatch.setattr(sys, "platform", "win32")
        monkeypatch.delenv("APPDATA", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setenv("USERPROFILE", str(tmp_path))
        assert lens_logging.get_log_directory() == os.path.join(str(tmp_path), AppConstants.APP_NAME)

class TestLevel:

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        monkeypatch.delenv("NEON_LENS_DEBUG", raising=False)
        monkeypatch.delenv("NEON_LENS_SUPPRESS_DEBUG", raising=False)

    def test_follows_flag(self):
        assert lens_logging._resolve_level(True) == logging.DEBUG
        assert lens_logging._resolve_level(False) == logging.INFO

    def test_env_forces_debug(self, monkeypatch):
        monkeypatch.setenv("NEON_LENS_DEBUG", "1")
        assert lens_logging._resolve_level(False) == logging.DEBUG

    def test_suppress_wins(self, monkeypatch):
        monkeypatch.setenv("NEON_LENS_DEBUG", "1")
        monkeypatch.setenv("NEON_LENS_SUPPRESS_DEBUG", "1")
        assert lens_logging._resolve_level(True) == logging.INFO

    def test_logger_uses_app_logger_name(self):
        assert lens_logging.logger.name == AppConstants.LOGGER_NAME
