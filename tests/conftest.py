import os

import pytest

# Must be set before shiftreport.api.fastapi_app is imported by any test.
os.environ.setdefault("SHIFTREPORT_SKIP_DOTENV", "1")

from config.settings import MailSettings  # noqa: E402
from observability.metrics import RegistryMetricsClient, reset_metrics_client, set_metrics_client  # noqa: E402
from shiftreport.api import dependencies  # noqa: E402

_ISOLATED_ENV = (
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_USER",
    "SMTP_PASS",
    "SMTP_PASSWORD",
    "CONTACT_FROM_EMAIL",
    "PUPPETEER_EXECUTABLE_PATH",
    "CHROME_EXECUTABLE_PATH",
    "SHIFTREPORT_ENV",
    "NODE_ENV",
    "SHIFTREPORT_API_TOKEN",
    "SHIFTREPORT_LOGO_PATH",
    "METRICS_BACKEND",
    "METRICS_ENABLED",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)
    dependencies.get_auth_settings.cache_clear()
    dependencies.get_asset_settings.cache_clear()
    yield
    dependencies.get_auth_settings.cache_clear()
    dependencies.get_asset_settings.cache_clear()


@pytest.fixture
def metrics():
    client = RegistryMetricsClient()
    set_metrics_client(client)
    yield client
    reset_metrics_client()


@pytest.fixture
def mail_settings():
    return MailSettings(
        SMTP_HOST="smtp.example.org",
        SMTP_PORT=587,
        SMTP_USER="mailer",
        SMTP_PASS="s3cret-password",
        CONTACT_FROM_EMAIL="parte@example.org",
    )


@pytest.fixture
def valid_payload():
    return {
        "email": "jefe.guardia@example.org",
        "fecha": "2026-03-05",
        "jefeGuardia": "Dra. Ruiz",
        "pruebas": [{"tipo": "TAC", "cantidad": 2}],
        "especialidades": [],
        "incidenciasHtml": "<p><b>Sin</b> incidencias <font color=\"#b91c1c\">relevantes</font></p>",
        "pendientesIngreso": 3,
        "pendientesEvolucion": "1",
        "pendientesMedico": 0,
        "observacionPendientesUbicacion": 4,
    }
