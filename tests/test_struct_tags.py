from gobru.extractors.go.structtag import parse_struct_tag


def test_parse_multiple_keys_in_order():
    tags = parse_struct_tag('json:"Memo__c,omitempty" binding:"required,max=64" db:"memo"')
    assert list(tags.items()) == [
        ("json", "Memo__c,omitempty"),
        ("binding", "required,max=64"),
        ("db", "memo"),
    ]


def test_escaped_quote_in_value():
    assert parse_struct_tag(r'json:"a\"b"') == {"json": 'a"b'}


def test_repeated_key_keeps_first_value():
    assert parse_struct_tag('json:"a" json:"b"') == {"json": "a"}


def test_malformed_pairs_stop_parsing():
    assert parse_struct_tag("json:Memo") == {}
    assert parse_struct_tag('json:"a" bad') == {"json": "a"}
    assert parse_struct_tag('json:"unterminated') == {}
    assert parse_struct_tag("") == {}
