import pytest

from banalytiq_sync.errors import ConfigurationError, ConfigurationMissing
from banalytiq_sync.validators import boolean, integer, not_blank, required_keys


def test_not_blank_ok():
    assert not_blank('banalytiq.db') == 'banalytiq.db'


def test_not_blank_fail():
    with pytest.raises(ConfigurationMissing):
        not_blank('  ')
    with pytest.raises(ConfigurationMissing):
        not_blank(None)
    with pytest.raises(ConfigurationError):
        not_blank(5)


def test_integer():
    assert integer('21') == 21
    assert integer(-2000) == -2000
    with pytest.raises(ConfigurationError):
        integer('abc')
    with pytest.raises(ConfigurationError):
        integer(True)


def test_boolean():
    assert boolean(False) is False
    with pytest.raises(ConfigurationError):
        boolean('yes')


def test_required_keys():
    required_keys({"HOST": "h", "USER": "u"}, ["HOST", "USER"])
    with pytest.raises(ConfigurationMissing, match="PWD"):
        required_keys({"HOST": "h", "PWD": ""}, ["HOST", "PWD"], "FTP")
