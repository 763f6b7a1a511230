import json
from datetime import datetime, timedelta, timezone

import pytest

from usageanalytics.acore.capture import Capture
from usageanalytics.acore.errors import MessageTooBigError
from usageanalytics.acore.message import (
    MAX_BATCH_BYTES,
    MAX_MESSAGE_BYTES,
    MessageQueue,
    QueuedMessage,
    make_message,
    make_timestamp,
)


def _messages():
    m0 = make_message(Capture(distinct_id="1", event="A"), MAX_MESSAGE_BYTES)
    m1 = make_message(Capture(distinct_id="2", event="A"), MAX_MESSAGE_BYTES)
    return m0, m1


def test_message_queue_push_max_batch_size():
    m0, m1 = _messages()
    q = MessageQueue(max_batch_size=2, max_batch_bytes=MAX_BATCH_BYTES)
    assert q.push(m0) is None
    assert q.push(m1) == [m0, m1]
    assert q.pending == []


def test_message_queue_push_max_batch_bytes():
    m0, m1 = _messages()
    q = MessageQueue(max_batch_size=100, max_batch_bytes=len(m0.data) + 1)
    assert q.push(m0) is None
    assert q.push(m1) == [m0]
    assert q.pending == [m1]


def test_make_message_too_big():
    with pytest.raises(MessageTooBigError):
        make_message(Capture(distinct_id="1"), 1)


def test_flush_empties_queue():
    m0, _ = _messages()
    q = MessageQueue(max_batch_size=10, max_batch_bytes=MAX_BATCH_BYTES)
    q.push(m0)
    assert q.flush() == [m0]
    assert q.pending_bytes == 0
    assert q.flush() == []


def test_queued_message_size_counts_comma():
    msg = QueuedMessage({"a": 1}, b'{"a":1}')
    assert msg.size() == 8


def test_make_timestamp():
    default = datetime(2009, 11, 10, 23, tzinfo=timezone.utc)
    other = datetime(2020, 1, 1, tzinfo=timezone.utc)
    assert make_timestamp(None, default) == default
    assert make_timestamp(other, default) == other


def test_timestamp_encoding_utc():
    ts = datetime(2009, 11, 10, 23, 0, 0, tzinfo=timezone.utc)
    msg = make_message({"timestamp": ts}, MAX_MESSAGE_BYTES)
    assert json.loads(msg.data)["timestamp"] == "2009-11-10T23:00:00Z"


def test_timestamp_encoding_offset_and_fraction():
    tz = timezone(timedelta(hours=-5, minutes=-30))
    ts = datetime(2009, 11, 10, 23, 0, 0, 500000, tzinfo=tz)
    msg = make_message({"timestamp": ts}, MAX_MESSAGE_BYTES)
    assert json.loads(msg.data)["timestamp"] == "2009-11-10T23:00:00.5-05:30"


def test_encoding_sorts_keys_and_escapes_html():
    msg = make_message({"b": "<&>", "a": 100.0}, MAX_MESSAGE_BYTES)
    assert msg.data == b'{"a":100,"b":"\\u003c\\u0026\\u003e"}'


def test_encoding_rejects_nan():
    with pytest.raises(ValueError):
        make_message({"x": float("nan")}, MAX_MESSAGE_BYTES)