"""Tests for pathway.http.response — buffered response writer."""

from pathway.http.response import ResponseSink, ResponseWriter


class TestResponseWriter:
    def test_initially_unwritten(self) -> None:
        response = ResponseWriter()
        assert not response.has_written()
        assert response.status == 0
        assert response.body == b""

    def test_write_implies_200(self) -> None:
        response = ResponseWriter()
        assert response.write(b"hello") == 5
        assert response.has_written()
        assert response.status == 200
        assert response.body == b"hello"

    def test_write_str(self) -> None:
        response = ResponseWriter()
        response.write("héllo")
        assert response.body == "héllo".encode()

    def test_status_counts_as_written(self) -> None:
        response = ResponseWriter()
        response.set_status(204)
        assert response.has_written()
        response.write(b"x")
        assert response.status == 204

    def test_write_text(self) -> None:
        response = ResponseWriter()
        response.write_text("Not Found", status=404)
        assert response.status == 404
        assert response.get_header("content-type") == "text/plain; charset=utf-8"
        assert response.body == b"Not Found"

    def test_write_json(self) -> None:
        response = ResponseWriter()
        response.write_json({"id": 1})
        assert response.status == 200
        assert response.get_header("Content-Type") == "application/json"
        assert response.body == b'{"id": 1}'

    def test_set_header_replaces(self) -> None:
        response = ResponseWriter()
        response.set_header("X-Token", "a")
        response.set_header("x-token", "b")
        assert response.headers == [("x-token", "b")]
        assert response.get_header("X-TOKEN") == "b"
        assert response.get_header("missing") is None

    def test_redirect(self) -> None:
        response = ResponseWriter()
        response.redirect("/login")
        assert response.status == 302
        assert response.get_header("location") == "/login"

    def test_satisfies_sink_protocol(self) -> None:
        assert isinstance(ResponseWriter(), ResponseSink)
