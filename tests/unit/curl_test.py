from mockforge.core.curl import format_curl, resource_curls


def test_format_curl_without_body() -> None:
    assert format_curl("get", "http://x/a", {"Accept": "application/json"}) == (
        "curl --location \\\n  --request GET \\\n  'http://x/a' \\\n  --header 'Accept: application/json'"
    )


def test_format_curl_without_headers_or_body() -> None:
    assert format_curl("DELETE", "http://x/a/1") == "curl --location \\\n  --request DELETE \\\n  'http://x/a/1'"


def test_format_curl_with_body() -> None:
    command = format_curl("POST", "http://x/a", {"Content-Type": "application/json"}, {"name": "n"})
    lines = command.splitlines()
    assert lines[3] == "  --header 'Content-Type: application/json' \\"
    assert lines[4] == "  --data-raw '{"
    assert command.endswith("}'")


def test_resource_curls_uses_template_keys() -> None:
    curls = resource_curls("http://host/", "p1", "v1", "users", {"id": "$string.uuid", "name": "$x.y", "age": 1})
    assert "'http://host/p1/api/v1/users/{id}'" in curls["get"]
    assert '"name": "example"' in curls["create"]
    assert '"id"' not in curls["create"]
