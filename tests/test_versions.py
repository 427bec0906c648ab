import pytest

from release_compliance.versions import compare_versions, normalize_version, parse_version


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("1.2.0", "1.2.0", 0),
        ("2.0.0", "1.9.9", 1),
        ("1.9.9", "2.0.0", -1),
        ("v1.2", "1.2.0", 0),
        ("V1.2", "1.2.0", 0),
        ("1.x.0", "1.0.0", 0),
        ("1.10.0", "1.9.0", 1),
        ("1.0.0-beta", "1.0.0", 0),
        ("1.0.1-rc1", "1.0.0", 1),
        ("", "0.0.0", 0),
        (None, "0", 0),
        ("v.0.0.588", "0.0.588", 0),
    ],
)
def test_compare_versions(a, b, expected):
    assert compare_versions(a, b) == expected


def test_compare_is_antisymmetric():
    assert compare_versions("3.1", "3.0.9") == 1
    assert compare_versions("3.0.9", "3.1") == -1


def test_parse_version_treats_garbage_as_zero():
    assert parse_version("v2.x.7") == (2, 0, 7)
    assert parse_version("latest") == (0,)
    assert parse_version(None) == (0,)


def test_normalize_version_strips_prefix_only_before_digits():
    assert normalize_version(" v1.2 ") == "1.2"
    assert normalize_version("v.3.4") == "3.4"
    assert normalize_version("version-1") == "version-1"
