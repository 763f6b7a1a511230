import pytest

from usageanalytics.acore.errors import (
    AnalyticsError,
    ClientClosedError,
    ConfigError,
    FieldError,
    MessageTooBigError,
    TooManyRequestsError,
)


def test_config_error_message():
    error = ConfigError("testing", "Answer", 42)
    assert str(error) == "analytics.NewWithConfig: testing (analytics.Config.Answer: 42)"


def test_field_error_message():
    error = FieldError("testing.T", "Answer", 42)
    assert str(error) == "testing.T.Answer: invalid field value: 42"


def test_field_error_message_quotes_strings():
    error = FieldError("analytics.Alias", "Alias", "")
    assert str(error) == 'analytics.Alias.Alias: invalid field value: ""'


def test_field_error_equality():
    assert FieldError("a.B", "C", "") == FieldError("a.B", "C", "")
    assert not FieldError("a.B", "C", "") == FieldError("a.B", "D", "")
    assert hash(FieldError("a.B", "C", 1)) == hash(FieldError("a.B", "C", 1))


def test_config_error_attributes():
    error = ConfigError("bad", "interval", -1.0)
    assert (error.reason, error.field, error.value) == ("bad", "interval", -1.0)


@pytest.mark.parametrize(
    "error_cls, message",
    [
        (ClientClosedError, "the client was already closed"),
        (TooManyRequestsError, "too many requests are already in-flight"),
        (MessageTooBigError, "the message exceeds the maximum allowed size"),
    ],
)
def test_default_messages(error_cls, message):
    error = error_cls()
    assert str(error) == message
    assert isinstance(error, AnalyticsError)


def test_errors_can_be_raised_and_caught_as_base():
    with pytest.raises(AnalyticsError) as excinfo:
        raise FieldError("x", "y", None)
    assert excinfo.value == FieldError("x", "y", None)
    assert not excinfo.value == FieldError("x", "z", None)