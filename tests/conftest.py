"""Configuração do pytest para o núcleo de interações."""

import sys
from pathlib import Path

import pytest

# Adiciona src/ ao PYTHONPATH para permitir imports absolutos
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from tests.fakes.fake_discord_http import FakeDiscordHttpClient  # noqa: E402
from tests.fakes.signing import generate_keypair  # noqa: E402


@pytest.fixture
def keypair():
    """(chave privada, chave pública hex) gerados por teste."""
    return generate_keypair()


@pytest.fixture
def fake_http() -> FakeDiscordHttpClient:
    return FakeDiscordHttpClient()


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    from config.settings import get_base_settings, get_discord_settings

    get_base_settings.cache_clear()
    get_discord_settings.cache_clear()
    yield
    get_base_settings.cache_clear()
    get_discord_settings.cache_clear()
