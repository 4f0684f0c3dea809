"""Tests for body normalization, GraphQL envelopes and multipart parts."""

import json

import pytest

from restfile.body import compact_form, normalize_body
from restfile.files import FileResolver, MemoryFileReader
from restfile.graphql import build_graphql_body, detect_graphql, escape_query
from restfile.headers import Headers
from restfile.multipart import extract_boundary, parse_multipart, parse_section
from restfile.parser import parse_request

BOUNDARY = "----WebKitFormBoundary7MA4YWxkTrZu0gW"


@pytest.fixture
def resolver():
    return FileResolver(
        "/project",
        MemoryFileReader(
            {
                "/project/users.csv": "id,name\r\n1,John\r\n",
                "/project/latin.txt": "café",
            },
            cwd="/cwd",
        ),
    )


class TestNormalizeBody:
    """Tests for the body normalizer."""

    def test_empty_body(self, resolver):
        assert normalize_body([], "", resolver).raw_body == ""

    def test_blank_only_body_is_empty(self, resolver):
        result = normalize_body(["", "  ", ""], "text/plain", resolver)
        assert result.raw_body == ""
        assert result.warnings == []

    def test_lines_joined_with_newline(self, resolver):
        result = normalize_body(["line one", "  line two"], "text/plain", resolver)
        assert result.raw_body == "line one\n  line two"

    def test_multipart_lines_joined_with_crlf(self, resolver):
        result = normalize_body(["a", "b"], "multipart/form-data; boundary=x", resolver)
        assert result.raw_body == "a\r\nb"

    def test_file_reference_inlined(self, resolver):
        result = normalize_body(["< users.csv"], "text/csv", resolver)
        assert result.raw_body == "id,name\n1,John"

    def test_file_reference_with_encoding_marker(self, resolver):
        result = normalize_body(["<@latin1 ./latin.txt"], "text/plain", resolver)
        assert result.raw_body == "café"

    def test_indented_reference_is_not_a_file(self, resolver):
        result = normalize_body(["  < users.csv"], "text/plain", resolver)
        assert result.raw_body == "  < users.csv"

    def test_missing_file_reference(self, resolver):
        result = normalize_body(["before", "< ./nope.txt", "after"], "", resolver)
        assert result.raw_body == "before\n< ./nope.txt\nafter"
        assert len(result.warnings) == 1
        assert "'./nope.txt'" in result.warnings[0]


class TestFormUrlEncoded:
    """Tests for form body compaction."""

    def test_fields_on_separate_lines(self, resolver):
        result = normalize_body(
            ["username=john", "&password=secret123"],
            "application/x-www-form-urlencoded",
            resolver,
        )
        assert result.raw_body == "username=john&password=secret123"

    def test_compact_form_drops_blank_fragments(self):
        assert compact_form("  a=1  \n\n&b=2\n   \nc=3") == "a=1&b=2&c=3"

    def test_request_level_form_body(self):
        req = parse_request(
            "POST https://api.example.com/login\n"
            "Content-Type: application/x-www-form-urlencoded\n"
            "\n"
            "username=john\n"
            "&password=secret123"
        )
        assert req.raw_body == "username=john&password=secret123"
        assert "\n" not in req.raw_body


class TestGraphQLEnvelope:
    """Tests for the GraphQL JSON envelope."""

    def test_exact_envelope(self):
        body = 'query GetUser {\n user(id:"1"){name}\n}'
        assert build_graphql_body(body) == (
            '{"query":"query GetUser {\\n user(id:\\"1\\"){name}\\n}",'
            '"operationName":"GetUser","variables":{}}'
        )

    def test_variables_after_blank_line(self):
        body = 'query GetUser($id: ID!) {\n  user(id: $id) { name }\n}\n\n{"id": "123"}\n'
        envelope = build_graphql_body(body)
        assert envelope.endswith(',"variables":{"id": "123"}}')
        assert json.loads(envelope)["variables"] == {"id": "123"}

    def test_blank_variables_default_to_empty_object(self):
        assert build_graphql_body("{ users { id } }\n\n   ").endswith(',"variables":{}}')

    def test_anonymous_query_has_no_operation_name(self):
        envelope = build_graphql_body("{\n  users { id }\n}")
        assert '"operationName"' not in envelope
        assert list(json.loads(envelope)) == ["query", "variables"]

    @pytest.mark.parametrize(
        "document, name",
        [
            ("query GetUser { user { id } }", "GetUser"),
            ('mutation CreateUser {\n  createUser(name: "John") { id }\n}', "CreateUser"),
            ("subscription OnUserCreated { userCreated { id } }", "OnUserCreated"),
        ],
    )
    def test_operation_names(self, document, name):
        envelope = json.loads(build_graphql_body(document))
        assert list(envelope) == ["query", "operationName", "variables"]
        assert envelope["operationName"] == name

    def test_escaped_query_round_trips(self):
        query = 'query Q {\n\tfield(arg: "a\\b")\r\n}'
        envelope = json.loads(build_graphql_body(query))
        assert envelope["query"] == query

    def test_escape_order(self):
        assert escape_query('\\"') == '\\\\\\"'


class TestDetectGraphQL:
    """Tests for GraphQL detection."""

    def test_request_type_header_is_removed(self):
        headers = Headers({"x-request-type": "graphql", "Accept": "*/*"})
        assert detect_graphql(headers, "https://api.example.com/api") is True
        assert "X-Request-Type" not in headers

    def test_other_request_type_is_kept(self):
        headers = Headers({"X-Request-Type": "REST"})
        assert detect_graphql(headers, "https://api.example.com/api") is False
        assert headers["X-Request-Type"] == "REST"

    @pytest.mark.parametrize(
        "url, content_type, expected",
        [
            ("https://api.example.com/graphql", None, True),
            ("https://api.example.com/graphql", "application/json", True),
            ("https://api.example.com/graphql?debug=1", "application/json; charset=utf-8", True),
            ("https://api.example.com/graphql", "text/plain", False),
            ("https://api.example.com/graphql/schema", None, False),
            ("https://api.example.com/users", None, False),
        ],
    )
    def test_detect_by_url(self, url, content_type, expected):
        headers = Headers()
        if content_type is not None:
            headers["Content-Type"] = content_type
        assert detect_graphql(headers, url) is expected

    def test_request_with_graphql_header(self):
        req = parse_request(
            "POST https://api.example.com/api\n"
            "Content-Type: application/json\n"
            "X-Request-Type: GraphQL\n"
            "\n"
            "mutation CreateUser($input: CreateUserInput!) {\n"
            "  createUser(input: $input) {\n"
            "    id\n"
            "  }\n"
            "}\n"
            "\n"
            '{"input": {"name": "John"}}'
        )
        envelope = json.loads(req.raw_body)
        assert envelope["operationName"] == "CreateUser"
        assert envelope["variables"] == {"input": {"name": "John"}}
        assert "X-Request-Type" not in req.headers

    def test_request_auto_detected_by_url(self):
        req = parse_request(
            "POST https://api.example.com/graphql\n"
            "\n"
            "query GetUsers {\n"
            "  users { id }\n"
            "}"
        )
        assert json.loads(req.raw_body)["query"] == "query GetUsers {\n  users { id }\n}"


MULTIPART_BODY = (
    f"--{BOUNDARY}\r\n"
    'Content-Disposition: form-data; name="title"\r\n'
    "\r\n"
    "My Document\r\n"
    f"--{BOUNDARY}\r\n"
    'Content-Disposition: form-data; name="file"; filename="test.txt"\r\n'
    "Content-Type: text/plain\r\n"
    "\r\n"
    "file contents\r\n"
    f"--{BOUNDARY}\r\n"
    'Content-Disposition: form-data; name="document"\r\n'
    "\r\n"
    "< ./document.pdf\r\n"
    f"--{BOUNDARY}--"
)


class TestMultipart:
    """Tests for the multipart sectioner."""

    @pytest.mark.parametrize(
        "content_type, expected",
        [
            (f"multipart/form-data; boundary={BOUNDARY}", BOUNDARY),
            (f'multipart/form-data; boundary="{BOUNDARY}"', BOUNDARY),
            (f"multipart/form-data; BOUNDARY={BOUNDARY}", BOUNDARY),
            ("multipart/form-data", ""),
            ("application/json", ""),
        ],
    )
    def test_extract_boundary(self, content_type, expected):
        assert extract_boundary(content_type) == expected

    def test_text_section(self):
        part = parse_section('Content-Disposition: form-data; name="username"\n\njohn_doe')
        assert part.name == "username"
        assert part.value == "john_doe"
        assert part.is_file is False

    def test_file_section(self):
        part = parse_section(
            'Content-Disposition: form-data; name="avatar"; filename="photo.jpg"\r\n'
            "Content-Type: image/jpeg\r\n"
            "\r\n"
            "binary"
        )
        assert part.name == "avatar"
        assert part.file_name == "photo.jpg"
        assert part.content_type == "image/jpeg"
        assert part.is_file is True

    def test_filename_before_name(self):
        part = parse_section(
            'Content-Disposition: form-data; filename="a.txt"; name="upload"\n\nx'
        )
        assert part.name == "upload"
        assert part.file_name == "a.txt"

    def test_section_keeps_file_reference_value(self):
        part = parse_section('Content-Disposition: form-data; name="document"\n\n< ./document.pdf')
        assert part.value == "< ./document.pdf"
        assert part.is_file is False

    def test_parse_multipart(self):
        parts = parse_multipart(MULTIPART_BODY, f"multipart/form-data; boundary={BOUNDARY}")
        assert [p.name for p in parts] == ["title", "file", "document"]
        assert parts[0].value == "My Document"
        assert parts[1].file_name == "test.txt"
        assert parts[1].value == "file contents"
        assert parts[2].file_path == "./document.pdf"
        assert parts[2].is_file is True
        assert parts[2].value == ""

    def test_no_boundary_gives_no_parts(self):
        assert parse_multipart(MULTIPART_BODY, "multipart/form-data") == []

    def test_sections_without_name_are_dropped(self):
        body = "--b\r\nContent-Type: text/plain\r\n\r\norphan\r\n--b--"
        assert parse_multipart(body, "multipart/form-data; boundary=b") == []

    def test_joined_sections_are_recovered(self):
        fields = [("alpha", "1"), ("beta", "two words"), ("gamma", "3")]
        body = "".join(
            f'--x\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n{value}\r\n'
            for name, value in fields
        ) + "--x--"
        parts = parse_multipart(body, "multipart/form-data; boundary=x")
        assert [(p.name, p.value) for p in parts] == fields

    def test_request_level_multipart(self):
        req = parse_request(
            "POST https://api.example.com/upload\n"
            f"Content-Type: multipart/form-data; boundary={BOUNDARY}\n"
            "\n"
            f"--{BOUNDARY}\n"
            'Content-Disposition: form-data; name="title"\n'
            "\n"
            "My Document\n"
            f"--{BOUNDARY}\n"
            'Content-Disposition: form-data; name="file"; filename="test.txt"\n'
            "Content-Type: text/plain\n"
            "\n"
            "< ./test.txt\n"
            f"--{BOUNDARY}--"
        )
        assert "\r\n" in req.raw_body
        assert len(req.multipart_parts) == 2
        assert req.multipart_parts[0].name == "title"
        assert req.multipart_parts[0].value == "My Document"
        assert req.multipart_parts[1].name == "file"
        assert req.multipart_parts[1].file_name == "test.txt"

    def test_non_multipart_request_has_no_parts(self):
        req = parse_request("POST https://x.io\nContent-Type: text/plain\n\nhello")
        assert req.multipart_parts == []
