from pagecraft.core.templating import resolve_props, resolve_template


def test_placeholders_are_substituted():
    assert resolve_template("Hello {{name}}!", {"name": "Ada"}) == "Hello Ada!"


def test_missing_or_none_field_keeps_placeholder():
    assert resolve_template("{{title}} - {{sub}}", {"title": "T", "sub": None}) == "T - {{sub}}"


def test_non_string_values_pass_through():
    assert resolve_template(42, {"x": 1}) == 42
    assert resolve_template(["{{x}}"], {"x": 1}) == ["{{x}}"]


def test_values_are_stringified():
    assert resolve_template("{{count}} items", {"count": 3}) == "3 items"


def test_resolve_props_resolves_every_value():
    props = {"text": "{{body}}", "size": 2, "alt": "static"}
    assert resolve_props(props, {"body": "Hi"}) == {"text": "Hi", "size": 2, "alt": "static"}
