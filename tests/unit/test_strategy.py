"""
Unit tests for the serving strategies.
"""

import io

from rangeserver.dispatcher import ResponseWriter
from rangeserver.strategy import DirectoryStrategy, SingleFileStrategy


class FakeHandler:
    """Records which transfer method a strategy called."""

    def __init__(self):
        self.calls = []

    def serve_tree(self, root):
        self.calls.append(("tree", root))

    def serve_file(self, path):
        self.calls.append(("file", path))


class TestDirectoryStrategy:

    def test_delegates_to_tree(self, site_dir):
        handler = FakeHandler()
        response = ResponseWriter(io.BytesIO())

        DirectoryStrategy(str(site_dir)).serve(response, handler)

        assert handler.calls == [("tree", str(site_dir))]
        assert response.headers == []


class TestSingleFileStrategy:

    def test_serves_fixed_file_as_attachment(self, report_file):
        handler = FakeHandler()
        response = ResponseWriter(io.BytesIO())

        SingleFileStrategy(str(report_file)).serve(response, handler)

        assert handler.calls == [("file", str(report_file))]
        assert response.headers == [
            ("Content-Disposition", 'attachment; filename="report.pdf"'),
        ]

    def test_shared_between_requests(self, report_file):
        strategy = SingleFileStrategy(str(report_file))
        first, second = ResponseWriter(io.BytesIO()), ResponseWriter(io.BytesIO())

        strategy.serve(first, FakeHandler())
        strategy.serve(second, FakeHandler())

        assert first.headers == second.headers
        assert len(second.headers) == 1
