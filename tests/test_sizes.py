import pytest

from pure_disk.models import FixedSize, REMAINING_SPACE
from pure_disk.sizes import parse_size, parse_size_or_default
from pure_disk.utils.exceptions import InvalidSizeFormat, ValidationError


@pytest.mark.parametrize("token, magnitude, unit, expected_bytes", [
    ("512M", 512, "M", 512 * 2 ** 20),
    ("8G", 8, "G", 8 * 2 ** 30),
    ("1G", 1, "G", 2 ** 30),
    ("  20G ", 20, "G", 20 * 2 ** 30),
])
def test_parse_valid_sizes(token, magnitude, unit, expected_bytes):
    size = parse_size(token)
    assert size == FixedSize(magnitude=magnitude, unit=unit)
    assert size.bytes == expected_bytes
    assert not size.is_remaining


@pytest.mark.parametrize("token", ["512", "8g", "1.5G", "G", "-1G", "10T", "10 G", "abc", "M512"])
def test_parse_invalid_sizes(token):
    with pytest.raises(InvalidSizeFormat) as excinfo:
        parse_size(token)
    assert excinfo.value.token == token.strip()


def test_invalid_size_is_a_validation_error():
    with pytest.raises(ValidationError):
        parse_size("lots")


@pytest.mark.parametrize("token", ["", "0", None, "   "])
def test_remaining_space_when_allowed(token):
    assert parse_size(token, allow_remaining=True) is REMAINING_SPACE


@pytest.mark.parametrize("token", ["", "0"])
def test_remaining_space_rejected_where_fixed_size_required(token):
    with pytest.raises(InvalidSizeFormat, match="fixed size is required"):
        parse_size(token)


def test_remaining_space_sgdisk_end():
    assert REMAINING_SPACE.sgdisk_end == "0"
    assert FixedSize(magnitude=512, unit="M").sgdisk_end == "+512M"


def test_default_used_for_empty_answer():
    assert parse_size_or_default("", "512M") == FixedSize(magnitude=512, unit="M")
    assert parse_size_or_default("1G", "512M") == FixedSize(magnitude=1, unit="G")


def test_default_does_not_hide_invalid_answer():
    with pytest.raises(InvalidSizeFormat):
        parse_size_or_default("big", "512M")
