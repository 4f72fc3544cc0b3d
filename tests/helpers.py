import json


def parse_ndjson(body):
    """Parse an NDJSON body, asserting every non-empty line is a complete JSON object."""
    lines = body.split("\n")
    assert lines[-1] == "", "NDJSON body must end with a newline"

    envelopes = []
    for line in lines[:-1]:
        assert line.strip(), "NDJSON body must not contain blank lines"
        envelopes.append(json.loads(line))
    return envelopes


def chat_text(envelopes):
    """Concatenate the content deltas of chat-flavor envelopes."""
    return "".join(e["message"]["content"] for e in envelopes if "message" in e)


def generate_text(envelopes):
    """Concatenate the deltas of generate-flavor envelopes."""
    return "".join(e["response"] for e in envelopes if "response" in e)


def assert_terminal_envelope(envelope, finish_key="finish_reason", finish_reason="stop"):
    """Assert the envelope is a proper end-of-stream marker."""
    assert envelope["done"] is True, f"Expected terminal envelope, got: {envelope}"
    assert envelope[finish_key] == finish_reason
    for stat in ("total_duration", "load_duration", "prompt_eval_count", "eval_count", "eval_duration"):
        assert stat in envelope, f"Terminal envelope is missing '{stat}'"


def assert_streaming_envelopes(envelopes):
    """Assert all but the last envelope are intermediate and the last one is terminal."""
    assert envelopes, "Stream produced no envelopes"
    assert all(e["done"] is False for e in envelopes[:-1])
    assert envelopes[-1]["done"] is True
