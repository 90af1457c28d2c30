import pytest

from llmsupport.templating import collect_variables, render_file, render_template


@pytest.fixture
def template_file(tmp_path):
    path = tmp_path / "template.txt"
    path.write_text("Hello, {{name}}! You are {{age}} years old.")
    return path


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "data.json"
    path.write_text('{"name":"Alice","age":"30"}')
    return path


def test_substitute_from_command_line(template_file):
    variables = collect_variables(assignments=["name=Bob", "age=25"])
    output = render_file(template_file, variables)
    assert "Hello, Bob!" in output and "25 years old" in output
    assert output == "Hello, Bob! You are 25 years old."


def test_substitute_from_data_file(template_file, data_file):
    output = render_file(template_file, collect_variables(data_file=data_file))
    assert output == "Hello, Alice! You are 30 years old."


def test_stdin_not_supported():
    with pytest.raises(ValueError, match="stdin not supported"):
        render_file("-", {})


def test_bracket_syntax(tmp_path):
    path = tmp_path / "template.txt"
    path.write_text("Hello, [[name]]!")
    variables = collect_variables(assignments=["name=World"])
    assert render_file(path, variables, syntax="brackets") == "Hello, World!"


def test_default_value(tmp_path):
    path = tmp_path / "template.txt"
    path.write_text("Hello, {{name|Guest}}!")
    assert "Hello, Guest!" in render_file(path, {})


def test_unknown_placeholder_kept_and_reported_in_strict_mode():
    messages = []
    output = render_template("a {{ missing }} b", {}, strict=True, warn=messages.append)
    assert output == "a {{ missing }} b"
    assert messages == ["ERROR: Undefined variable: missing"]


def test_unknown_placeholder_not_reported_without_strict():
    messages = []
    assert render_template("{{x}}", {}, warn=messages.append) == "{{x}}"
    assert messages == []


def test_command_line_overrides_data_file(data_file):
    variables = collect_variables(data_file=data_file, assignments=["name=Carol"])
    assert variables["name"] == "Carol"
    assert variables["age"] == "30"


def test_json_values_are_formatted(tmp_path):
    path = tmp_path / "data.json"
    path.write_text('{"n": 30, "f": 1.5, "b": true, "l": [1, "x"], "z": null}')
    variables = collect_variables(data_file=path)
    assert variables == {"n": "30", "f": "1.5", "b": "true", "l": "[1 x]", "z": "<nil>"}


def test_environment_variables(monkeypatch):
    monkeypatch.setenv("TEMPLATE_TEST_VALUE", "from-env")
    variables = collect_variables(use_env=True, assignments=["OTHER=1"])
    assert variables["TEMPLATE_TEST_VALUE"] == "from-env"
    assert render_template("{{TEMPLATE_TEST_VALUE}}", variables) == "from-env"


def test_file_reference_with_strip(tmp_path):
    value_file = tmp_path / "value.txt"
    value_file.write_text("  padded\n")
    assert collect_variables(assignments=[f"v=@{value_file}"])["v"] == "  padded\n"
    assert collect_variables(assignments=[f"v=@{value_file}"], strip=True)["v"] == "padded"


def test_missing_reference_file(tmp_path):
    with pytest.raises(OSError, match="failed to read file for variable v"):
        collect_variables(assignments=[f"v=@{tmp_path / 'absent.txt'}"])


def test_assignment_without_equals_ignored():
    assert collect_variables(assignments=["novalue", "k=v"]) == {"k": "v"}


def test_invalid_data_file(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("{oops}")
    with pytest.raises(ValueError, match="invalid JSON in data file"):
        collect_variables(data_file=path)