from classifier.prompt import (
    REFERENCE_END,
    REFERENCE_START,
    SYSTEM_PROMPT,
    TRADE_LANE,
    build_user_message,
)


def test_build_user_message_without_reference():
    message = build_user_message("")

    assert "knowledge of the HTS" in message
    assert TRADE_LANE in message
    assert REFERENCE_START not in message


def test_build_user_message_wraps_reference_text():
    message = build_user_message("8471.30.01 Portable computers ... Free")

    assert TRADE_LANE in message
    assert message.endswith(
        f"{REFERENCE_START}\n8471.30.01 Portable computers ... Free\n{REFERENCE_END}"
    )


def test_trade_lane_clause():
    assert "from India to the US directly" in TRADE_LANE


def test_system_prompt_describes_both_error_shapes():
    assert '"code": "UNCLASSIFIABLE"' in SYSTEM_PROMPT
    assert '"code": "INVALID_IMAGE"' in SYSTEM_PROMPT
    assert "exactly 5 results" in SYSTEM_PROMPT
    assert "rank 1 = cheapest" in SYSTEM_PROMPT
