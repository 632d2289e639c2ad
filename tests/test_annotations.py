from gobru.extractors.annotations import extract_annotations, has_route


def test_extract_all_tags():
    lines = [
        "IssueCheck issues a check.",
        "",
        "@name Issue check",
        "@route POST /checks/issue",
        "@body IssueCheckRequest",
        "@description Issues a check",
        "for the given account.",
    ]
    a = extract_annotations(lines)

    assert a == {
        "name": "Issue check",
        "route_method": "POST",
        "route_path": "/checks/issue",
        "body": "IssueCheckRequest",
        "description": "Issues a check for the given account.",
    }
    assert has_route(a)


def test_description_multiline_collapses_whitespace():
    lines = [
        "@description   Creates a    user",
        "      and sends\ta welcome   email  ",
        "   to them",
        "@route PUT /users/:id",
    ]
    a = extract_annotations(lines)
    assert a["description"] == "Creates a user and sends a welcome email to them"
    assert a["route_method"] == "PUT"
    assert a["route_path"] == "/users/:id"


def test_description_without_text_is_empty_string():
    a = extract_annotations(["@description", "@route GET /x"])
    assert "description" in a
    assert a["description"] == ""


def test_description_keeps_unrecognised_at_lines():
    a = extract_annotations(["@description first", "@Summary second"])
    assert a["description"] == "first @Summary second"


def test_malformed_tag_line_ends_description():
    a = extract_annotations(["@description a", "@route get /x", "more text"])
    assert a["description"] == "a"
    assert not has_route(a)


def test_tag_keyword_prefix_does_not_end_description():
    a = extract_annotations(["@description a", "@bodyguard b"])
    assert a["description"] == "a @bodyguard b"


def test_tags_in_any_order_and_precedence():
    lines = [
        "@body First",
        "@name one",
        "@route GET /a",
        "@route POST /b",
        "@body Second",
        "@name two",
    ]
    a = extract_annotations(lines)
    assert a["name"] == "two"
    assert (a["route_method"], a["route_path"]) == ("GET", "/a")
    assert a["body"] == "First"


def test_no_route_tag_means_not_a_route():
    a = extract_annotations(["CreateUser creates a user", "@body CreateUserRequest"])
    assert "route_method" not in a
    assert not has_route(a)


def test_route_requires_uppercase_method_and_a_path():
    assert not has_route(extract_annotations(["@route get /x"]))
    assert not has_route(extract_annotations(["@route GET"]))


def test_route_path_is_trimmed_and_keeps_placeholders():
    a = extract_annotations(["  @route DELETE   /users/{id}/tokens/:token   "])
    assert a["route_path"] == "/users/{id}/tokens/:token"


def test_body_accepts_package_qualified_name():
    a = extract_annotations(["@body dto.CreateUser"])
    assert a["body"] == "dto.CreateUser"


def test_unmatched_lines_are_ignored():
    assert extract_annotations(["just prose", "TODO: later", "@unknown tag"]) == {}
