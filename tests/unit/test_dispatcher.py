"""
Unit tests for the instrumented dispatcher.
"""

import io
import re
import threading

import pytest

from rangeserver.dispatcher import COUNTER_LIMIT, ConnectionCounter, Dispatcher, ResponseWriter


class TestConnectionCounter:
    """Tests for ConnectionCounter."""

    def test_starts_at_one(self):
        counter = ConnectionCounter()

        assert counter.increment() == 1
        assert counter.increment() == 2

    def test_concurrent_increments_are_distinct(self):
        counter = ConnectionCounter()
        seen = []
        lock = threading.Lock()

        def worker():
            values = [counter.increment() for _ in range(500)]
            with lock:
                seen.extend(values)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(seen) == list(range(1, 4001))

    def test_wraps(self):
        counter = ConnectionCounter()
        counter._value = COUNTER_LIMIT

        assert counter.increment() == 1


class TestResponseWriter:
    """Tests for the response capture."""

    def test_initial_state(self):
        response = ResponseWriter(io.BytesIO())

        assert response.status == 0
        assert response.length == 0

    def test_first_status_wins(self):
        response = ResponseWriter(io.BytesIO())
        response.write_header(404)
        response.write_header(500)

        assert response.status == 404

    def test_length_is_last_write(self):
        stream = io.BytesIO()
        response = ResponseWriter(stream)
        response.write(b"x" * 100)
        response.write(b"y" * 7)

        assert response.length == 7
        assert stream.getvalue() == b"x" * 100 + b"y" * 7

    def test_headers_keep_order(self):
        response = ResponseWriter(io.BytesIO())
        response.add_header("Server", "test/1.0")
        response.add_header("Content-Disposition", "attachment")

        assert [k for k, _ in response.headers] == ["Server", "Content-Disposition"]


class FakeHandler:
    """Just enough of RequestHandler for the dispatcher."""

    def __init__(self, command="GET", path="/"):
        self.command = command
        self.path = path
        self.client_address = ("127.0.0.1", 51560)
        self.wfile = io.BytesIO()
        self.close_connection = False
        self.response = None

    def begin_response(self, response):
        self.response = response
        self.wfile = response

    def end_response(self):
        self.wfile = self.response.stream
        self.response = None


class ScriptedStrategy:
    """Writes a fixed status and body chunks through the sink."""

    def __init__(self, status=200, chunks=(b"hello\n",), error=None):
        self.status = status
        self.chunks = chunks
        self.error = error
        self.seen_headers = None

    def serve(self, response, handler):
        self.seen_headers = list(response.headers)
        response.write_header(self.status)
        for chunk in self.chunks:
            handler.wfile.write(chunk)
        if self.error is not None:
            raise self.error


END_LINE = re.compile(r"^\[(\d+)\] <<< (\d+) (\S+) (\d+)bytes$")


class TestDispatcher:
    """Tests for Dispatcher.dispatch."""

    @pytest.fixture(autouse=True)
    def info_logs(self, caplog):
        caplog.set_level("INFO", logger="Dispatcher")

    def test_logs_start_and_end(self, log_messages):
        dispatcher = Dispatcher(ScriptedStrategy(chunks=(b"<html>\n",)))

        dispatcher.dispatch(FakeHandler(path="/index.html?x=1"))

        start, end = log_messages("Dispatcher")
        assert start == "[1] >>> GET - 127.0.0.1:51560 - /index.html?x=1"
        match = END_LINE.match(end)
        assert match is not None
        assert match.group(1, 2, 4) == ("1", "200", "7")

    def test_queues_server_header(self):
        strategy = ScriptedStrategy()
        Dispatcher(strategy, server_name="range-http-server/9.9").dispatch(FakeHandler())

        assert strategy.seen_headers == [("Server", "range-http-server/9.9")]

    def test_restores_stream(self):
        handler = FakeHandler()
        stream = handler.wfile

        Dispatcher(ScriptedStrategy()).dispatch(handler)

        assert handler.wfile is stream
        assert stream.getvalue() == b"hello\n"

    def test_logged_size_is_last_write(self, log_messages):
        dispatcher = Dispatcher(ScriptedStrategy(chunks=(b"a" * 65536, b"b" * 10)))

        response = dispatcher.dispatch(FakeHandler())

        assert response.length == 10
        assert log_messages("Dispatcher")[-1].endswith(" 10bytes")

    def test_ids_increase_across_requests(self, log_messages):
        dispatcher = Dispatcher(ScriptedStrategy(status=404))

        for _ in range(3):
            dispatcher.dispatch(FakeHandler())

        ids = [END_LINE.match(m).group(1) for m in log_messages("Dispatcher") if "<<<" in m]
        assert ids == ["1", "2", "3"]

    def test_shared_counter(self):
        counter = ConnectionCounter()
        Dispatcher(ScriptedStrategy(), counter=counter).dispatch(FakeHandler())
        Dispatcher(ScriptedStrategy(), counter=counter).dispatch(FakeHandler())

        assert counter.value == 2

    def test_client_disconnect(self, caplog, log_messages):
        handler = FakeHandler()
        strategy = ScriptedStrategy(chunks=(b"partial",), error=BrokenPipeError("broken pipe"))

        response = Dispatcher(strategy).dispatch(handler)

        assert handler.close_connection is True
        assert response.length == len(b"partial")
        assert any(r.levelname == "WARNING" for r in caplog.records if r.name == "Dispatcher")
        assert END_LINE.match(log_messages("Dispatcher")[-1]).group(2) == "200"

    def test_unexpected_error_still_logs_end(self, log_messages):
        strategy = ScriptedStrategy(status=500, error=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            Dispatcher(strategy).dispatch(FakeHandler())

        assert END_LINE.match(log_messages("Dispatcher")[-1]).group(2) == "500"
