import pytest

from src.platform.config.core_setting import Settings
from src.platform.constant.path import BASE_DIR


pytestmark = pytest.mark.unit


class TestCorsOrigins:
    def test_example_env_file_loads(self, monkeypatch):
        monkeypatch.delenv('BACKEND_CORS_ORIGINS', raising=False)

        settings = Settings(_env_file=str(BASE_DIR / '.env.example'))  # type: ignore[call-arg]

        assert settings.BACKEND_CORS_ORIGINS == [
            'http://localhost:5173',
            'http://localhost:3000',
        ]

    @pytest.mark.parametrize(
        'raw, expected',
        [
            ('http://a.test, http://b.test', ['http://a.test', 'http://b.test']),
            ('http://a.test', ['http://a.test']),
            ('["http://a.test", "http://b.test"]', ['http://a.test', 'http://b.test']),
        ],
    )
    def test_environment_value_is_parsed(self, monkeypatch, raw, expected):
        monkeypatch.setenv('BACKEND_CORS_ORIGINS', raw)

        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.BACKEND_CORS_ORIGINS == expected

    def test_unset_means_no_origins(self, monkeypatch):
        monkeypatch.delenv('BACKEND_CORS_ORIGINS', raising=False)

        assert Settings(_env_file=None).BACKEND_CORS_ORIGINS == []  # type: ignore[call-arg]
