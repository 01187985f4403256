"""Tests for SSE framing and incremental decoding."""

import json

from stellarmind.client.sse import SSEDecoder, encode_event
from stellarmind.models.exploration import (
    DoneEvent,
    EdgeEvent,
    ExplorationEdge,
    ExplorationNode,
    MessageData,
    NodeEvent,
    NodeType,
)


def sample_stream() -> bytes:
    events = [
        NodeEvent(
            data=ExplorationNode(
                id="question-1", content="什么是意识？", level=0, node_type=NodeType.question
            )
        ),
        NodeEvent(
            data=ExplorationNode(
                id="question-2",
                content="意识的神经基础是什么？",
                level=1,
                node_type=NodeType.question,
                parent_id="question-1",
            )
        ),
        EdgeEvent(data=ExplorationEdge(source="question-1", target="question-2")),
        DoneEvent(data=MessageData(message="Exploration complete.")),
    ]
    return "".join(encode_event(e) for e in events).encode("utf-8")


class TestEncodeEvent:
    """Test event framing."""

    def test_frame_shape(self):
        frame = encode_event(DoneEvent(data=MessageData(message="Exploration complete.")))
        assert frame.startswith("data: ")
        assert frame.endswith("\n\n")
        assert json.loads(frame[len("data: "):]) == {
            "type": "done",
            "data": {"message": "Exploration complete."},
        }

    def test_node_uses_camel_case(self):
        node = ExplorationNode(
            id="answer-1", content="c", level=2, node_type=NodeType.answer, parent_id="question-9"
        )
        payload = json.loads(encode_event(NodeEvent(data=node))[len("data: "):])
        assert payload["data"] == {
            "id": "answer-1",
            "content": "c",
            "level": 2,
            "nodeType": "answer",
            "parentId": "question-9",
        }


class TestSSEDecoder:
    """Test incremental decoding across arbitrary chunk boundaries."""

    def test_whole_stream(self):
        events = SSEDecoder().feed(sample_stream())
        assert [e["type"] for e in events] == ["node", "node", "edge", "done"]

    def test_byte_by_byte_matches_whole(self):
        """Splitting inside lines and inside multi-byte characters changes nothing."""
        body = sample_stream()
        decoder = SSEDecoder()
        events = []
        for i in range(len(body)):
            events.extend(decoder.feed(body[i:i + 1]))
        events.extend(decoder.flush())

        assert events == SSEDecoder().feed(body)
        assert events[0]["data"]["content"] == "什么是意识？"

    def test_split_mid_character(self):
        body = 'data: {"type":"done","data":{"message":"完成"}}\n\n'.encode("utf-8")
        cut = body.index("完".encode("utf-8")) + 1
        decoder = SSEDecoder()

        assert decoder.feed(body[:cut]) == []
        events = decoder.feed(body[cut:])
        assert events[0]["data"]["message"] == "完成"

    def test_bad_json_is_skipped(self):
        body = b'data: {broken\n\ndata: {"type":"done","data":{"message":"ok"}}\n\n'
        events = SSEDecoder().feed(body)
        assert events == [{"type": "done", "data": {"message": "ok"}}]

    def test_non_data_lines_are_ignored(self):
        body = b': keep-alive\nevent: message\ndata: {"type":"done","data":{"message":"ok"}}\n\n'
        assert len(SSEDecoder().feed(body)) == 1

    def test_flush_handles_unterminated_line(self):
        decoder = SSEDecoder()
        assert decoder.feed(b'data: {"type":"done","data":{"message":"ok"}}') == []
        assert decoder.flush() == [{"type": "done", "data": {"message": "ok"}}]
        assert decoder.flush() == []

    def test_crlf_line_endings(self):
        body = b'data: {"type":"done","data":{"message":"ok"}}\r\n\r\n'
        assert SSEDecoder().feed(body) == [{"type": "done", "data": {"message": "ok"}}]
