from flora.utils.emitters import (
    SOCKETIO_NAMESPACE_ANALYSIS,
    WS_EVENT_ANALYSIS_PROGRESS,
    EmitterService,
)


class FakeSocketIO:
    def __init__(self) -> None:
        self.emits: list[dict] = []

    def emit(self, event, payload, room=None, namespace="/"):
        self.emits.append(
            {
                "event": event,
                "payload": payload,
                "room": room,
                "namespace": namespace,
            }
        )


class BrokenSocketIO:
    def emit(self, *args, **kwargs):
        raise ConnectionError("server gone")


def test_emit_analysis_progress_targets_session_room():
    sio = FakeSocketIO()
    emitter = EmitterService(sio=sio)

    emitter.emit_analysis_progress("abc123", "Decoding leaf patterns...")

    (event,) = sio.emits
    assert event["event"] == WS_EVENT_ANALYSIS_PROGRESS
    assert event["room"] == "session_abc123"
    assert event["namespace"] == SOCKETIO_NAMESPACE_ANALYSIS
    assert event["payload"]["text"] == "Decoding leaf patterns..."


def test_progress_callback_is_bound_to_session():
    sio = FakeSocketIO()
    callback = EmitterService(sio=sio).progress_callback("s1")

    callback("one")
    callback("two")

    assert [e["payload"]["text"] for e in sio.emits] == ["one", "two"]
    assert {e["room"] for e in sio.emits} == {"session_s1"}


def test_emit_failures_are_logged_not_raised():
    EmitterService(sio=BrokenSocketIO()).emit_analysis_progress("s1", "hello")
