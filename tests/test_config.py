import pytest

from module.sonic_player.config import PlayerSettings, load_settings
from module.sonic_player.utils.errors import ConfigError


def test_defaults_from_empty_environment():
    settings = load_settings({})

    assert settings == PlayerSettings()
    assert settings.is_configured is False
    assert settings.default_volume == 1.0


def test_reads_and_normalises_values():
    settings = load_settings({
        "SUBSONIC_URL": "https://music.example.com/ ",
        "SUBSONIC_USERNAME": "alice",
        "SUBSONIC_PASSWORD": "secret",
        "FFMPEG_PATH": "/usr/bin/ffmpeg",
        "DEFAULT_VOLUME": "1.7",
        "STREAM_MAX_BITRATE": "320",
        "STREAM_FORMAT": "opus",
        "DEBUG": "true",
    })

    assert settings.server_url == "https://music.example.com"
    assert settings.is_configured is True
    assert settings.ffmpeg_path == "/usr/bin/ffmpeg"
    assert settings.default_volume == 1.0
    assert settings.max_bitrate == 320
    assert settings.stream_format == "opus"
    assert settings.debug is True


@pytest.mark.parametrize("raw, expected", [("0.4", 0.4), ("-2", 0.0), ("nan", 1.0), ("loud", 1.0)])
def test_default_volume_parsing(raw, expected):
    assert load_settings({"DEFAULT_VOLUME": raw}).default_volume == expected


def test_require_configured_lists_missing_values():
    settings = load_settings({"SUBSONIC_URL": "https://x"})

    with pytest.raises(ConfigError) as exc_info:
        settings.require_configured()

    assert "SUBSONIC_USERNAME" in str(exc_info.value)
    assert "SUBSONIC_URL" not in str(exc_info.value)
