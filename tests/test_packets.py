from __future__ import annotations

from satellite.transport.packets import (
    extract_message,
    extract_user_id,
    format_chat_packet,
    parse_packet,
)


def test_parse_packet_extracts_message_and_sender():
    event = parse_packet('say" "buy sword" user_id=42"')
    assert event is not None
    assert event.message == "buy sword"
    assert event.sender_id == "42"


def test_parse_packet_accepts_bytes_and_extra_whitespace():
    event = parse_packet(b'{"header": 1} SAY"   "hello there" room=7 user_id=9001')
    assert event is not None
    assert event.message == "hello there"
    assert event.sender_id == "9001"


def test_missing_user_id_falls_back_to_anonymous():
    event = parse_packet('say" "anyone around?"')
    assert event is not None
    assert event.sender_id == "anonymous"
    assert event.is_anonymous


def test_non_chat_packets_yield_no_message():
    assert parse_packet("walk x=3 y=4 user_id=12") is None
    assert parse_packet("") is None
    assert parse_packet(b"\xff\xfe\x00garbage") is None
    assert extract_message('say" ""') is None


def test_user_id_requires_digits():
    assert extract_user_id("user_id=abc") == "anonymous"
    assert extract_user_id("user_id=0012") == "0012"


def test_outbound_packet_round_trips_through_the_interpreter():
    packet = format_chat_packet(3, 'say "hello"')
    event = parse_packet(packet)
    assert event is not None
    assert event.sender_id == "3"
    assert event.message == "say 'hello'"
