import re
from collections import namedtuple

MESSAGE_TAG = "SequenceNumber"
DELIMITER = ":"
DEFAULT_PAYLOAD = "MessageContent"

MAX_DATAGRAM_SIZE = 1024

_SEQ_PATTERN = re.compile(r"[0-9]+")


Message = namedtuple('Message', ['seq_no', 'payload'])


class MalformedMessageError(ValueError):
    pass


def encode_message(seq_no, payload=DEFAULT_PAYLOAD):
    if isinstance(seq_no, bool) or not isinstance(seq_no, int) or seq_no < 1:
        raise ValueError(f"Sequence number must be a positive integer, got {seq_no!r}")

    text = f"{MESSAGE_TAG}{DELIMITER}{seq_no}{DELIMITER}{payload}"
    data = text.encode('utf-8')

    if len(data) > MAX_DATAGRAM_SIZE:
        raise ValueError(f"Message too large: {len(data)} > {MAX_DATAGRAM_SIZE}")

    return data


def decode_message(data):
    """
    Parse a wire message into a Message.

    The wire form is exactly three fields, ``tag:seq_no:payload``. The split
    stops after the second delimiter, so the payload keeps any colons it holds.

    Args:
        data (bytes | str): Raw datagram contents or an already decoded string

    Returns:
        Message: The parsed sequence number and payload

    Raises:
        MalformedMessageError: Fewer than three fields, a sequence number that
            is not a non-negative decimal integer, or invalid UTF-8
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            text = bytes(data).decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedMessageError(f"Message is not valid UTF-8: {e}") from e
    else:
        text = data

    parts = text.split(DELIMITER, 2)
    if len(parts) < 3:
        raise MalformedMessageError(f"Invalid message format: {text!r}")

    _, seq_field, payload = parts
    if not _SEQ_PATTERN.fullmatch(seq_field):
        raise MalformedMessageError(f"Failed to parse sequence number: {seq_field!r}")

    return Message(int(seq_field), payload)
