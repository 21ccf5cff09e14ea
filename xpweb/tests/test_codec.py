import json

import pytest

from xpweb.errors import MalformedMessage, UnknownMessageType
from xpweb.models import CommandUpdateMessage, DatarefUpdateMessage, ResultMessage
from xpweb.network.codec import decode_message


def test_result_frame_decodes_with_empty_error_fields():
    message = decode_message('{"type":"result","req_id":7,"success":true}')

    assert isinstance(message, ResultMessage)
    assert message.req_id == 7
    assert message.success is True
    assert message.error_code == ""
    assert message.error_message == ""
    assert message.request is None


def test_failed_result_keeps_error_details():
    message = decode_message(
        {
            "type": "result",
            "req_id": 3,
            "success": False,
            "error_code": "invalid_dataref_id",
            "error_message": "Dataref 0 does not exist",
        }
    )

    assert message.success is False
    assert message.error_code == "invalid_dataref_id"
    assert message.error_message == "Dataref 0 does not exist"


def test_dataref_update_keys_decode_to_integer_ids():
    message = decode_message('{"type":"dataref_update_values","data":{"42":3.14}}')

    assert isinstance(message, DatarefUpdateMessage)
    assert list(message.data) == [42]
    assert message.data[42].value == 3.14
    assert message.data[42].dataref is None


def test_dataref_update_keeps_array_and_data_values():
    raw = json.dumps(
        {
            "type": "dataref_update_values",
            "data": {"7": [1.5, 2.5], "8": "SGVsbG8="},
        }
    ).encode("utf-8")

    message = decode_message(raw)

    assert message.data[7].as_float_list() == [1.5, 2.5]
    assert message.data[8].as_str() == "Hello"


def test_command_update_decodes_active_states():
    message = decode_message(
        '{"type":"command_update_is_active","data":{"12":true,"13":false}}'
    )

    assert isinstance(message, CommandUpdateMessage)
    assert message.data[12].is_active is True
    assert message.data[13].is_active is False
    assert message.data[12].command is None


def test_unknown_type_is_rejected():
    with pytest.raises(UnknownMessageType) as excinfo:
        decode_message('{"type":"bogus"}')
    assert excinfo.value.message_type == "bogus"


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2]",
        '{"req_id": 1}',
        '{"type": 5}',
        '{"type": "result", "success": true}',
        '{"type": "dataref_update_values", "data": {"abc": 1}}',
        '{"type": "dataref_update_values", "data": {"-4": 1}}',
        '{"type": "dataref_update_values", "data": {"99999999999999999999999": 1}}',
        '{"type": "command_update_is_active", "data": {"18446744073709551616": true}}',
        '{"type": "command_update_is_active", "data": {"1": "yes"}}',
        b"\xff\xfe",
    ],
)
def test_malformed_frames_are_rejected(raw):
    with pytest.raises(MalformedMessage):
        decode_message(raw)


def test_largest_entity_id_is_accepted():
    message = decode_message('{"type": "dataref_update_values", "data": {"18446744073709551615": 1}}')

    assert list(message.data) == [2**64 - 1]
