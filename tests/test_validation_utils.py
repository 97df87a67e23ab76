import pytest

from utils.validation_utils import is_blank, safe_extension, validate_secret


@pytest.mark.parametrize("secret", ["0000", "1234", "9876"])
def test_valid_secrets(secret):
    assert validate_secret(secret)


@pytest.mark.parametrize(
    "secret",
    ["12a4", "123", "12345", "", " 1234", "1234\n", "１２３４", "٤٤٤٤", None, 1234],
)
def test_invalid_secrets(secret):
    assert not validate_secret(secret)


def test_is_blank():
    assert is_blank(None)
    assert is_blank("")
    assert not is_blank(" ")
    assert not is_blank("alice")


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("Avatar.PNG", ".png"),
        ("archive.tar.gz", ".gz"),
        ("noext", ""),
        ("", ""),
        (None, ""),
        ("../../evil.sh;rm", ""),
        ("dir/photo.jpeg", ".jpeg"),
    ],
)
def test_safe_extension(filename, expected):
    assert safe_extension(filename) == expected
