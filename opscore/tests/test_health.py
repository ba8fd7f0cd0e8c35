import os
import subprocess
import sys
from pathlib import Path

import pytest
from django.urls import reverse
from rest_framework.settings import api_settings

from opscore.authentication import SessionTokenAuthentication
from opscore.handlers import api_exception_handler

pytestmark = pytest.mark.django_db

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def test_healthz(api_client):
    r = api_client.get(reverse('healthz'))
    assert r.status_code == 200
    assert r.json() == {'ok': True, 'db': True}


def test_errors_use_envelope(api_client):
    r = api_client.get(reverse('shifts'))
    assert r.status_code == 401
    assert r.json()['ok'] is False
    assert r['WWW-Authenticate'].startswith('Bearer')


def test_api_settings_resolve_project_classes():
    assert api_settings.EXCEPTION_HANDLER is api_exception_handler
    assert SessionTokenAuthentication in api_settings.DEFAULT_AUTHENTICATION_CLASSES


@pytest.mark.parametrize('first', ['opscore.authentication', 'opscore.exceptions', 'opscore.handlers'])
def test_fresh_interpreter_imports_cleanly(first):
    code = (
        'import django; django.setup(); '
        f'import {first}; '
        'from django.urls import reverse; reverse("login_view"); '
        'from rest_framework.settings import api_settings; '
        'api_settings.EXCEPTION_HANDLER; api_settings.DEFAULT_AUTHENTICATION_CLASSES'
    )
    env = dict(os.environ, DJANGO_SETTINGS_MODULE='healthops.settings')
    result = subprocess.run([sys.executable, '-c', code], cwd=PROJECT_ROOT, env=env,
                            capture_output=True, text=True, timeout=60)
    assert result.returncode == 0, result.stderr
