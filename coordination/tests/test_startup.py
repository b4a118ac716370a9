"""
Cold-start imports.

Each entry point is imported in a fresh interpreter: inside the test run
Django is already configured, which would hide import cycles between the
app's modules and the DRF settings they are referenced from.
"""
import os
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]


def _fresh_import(statement):
    env = {**os.environ, 'DJANGO_SETTINGS_MODULE': 'medevac.settings', 'ENV': 'dev'}
    return subprocess.run([sys.executable, '-c', statement], cwd=ROOT, env=env,
                          capture_output=True, text=True, timeout=120)


@pytest.mark.parametrize('module', ['medevac.asgi', 'medevac.wsgi'])
def test_entry_point_imports_cleanly(module):
    result = _fresh_import(f'import {module}')
    assert result.returncode == 0, result.stderr


def test_django_check_passes():
    result = _fresh_import('import django; django.setup(); '
                           'from django.core.management import call_command; call_command("check")')
    assert result.returncode == 0, result.stderr


def test_app_config_builds_verifier():
    from django.apps import apps
    from rest_framework.settings import api_settings

    from coordination.authentication import BearerTokenAuthentication
    assert apps.get_app_config('coordination').identity_verifier is not None
    assert BearerTokenAuthentication in api_settings.DEFAULT_AUTHENTICATION_CLASSES
