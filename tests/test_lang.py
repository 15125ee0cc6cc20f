"""
Tests for the pure parsing helpers: escaping, references, platforms and
shell-word expansion.
"""

import pytest

from lang.escaping import (
    escape_reference_marker,
    expand_word,
    is_valid_variable_name,
    remove_line_continuations,
    unescape_reference_marker,
)
from lang.platforms import InvalidPlatformError, PlatformSpec, parse_platform
from lang.references import InvalidReferenceError, parse_artifact, parse_target
from lang.templating import ExpansionError, render_template


def expander(scope):
    return lambda word: render_template(word, scope)


class TestEscaping:
    def test_escape_and_unescape(self):
        assert escape_reference_marker("a\\+b") == "a\\\\+b"
        assert unescape_reference_marker("a\\+b") == "a+b"

    def test_plain_marker_untouched(self):
        assert expand_word(expander({}), "+build/out", keep_reference_escape=True) == "+build/out"
        assert expand_word(expander({}), "+build/out", keep_reference_escape=False) == "+build/out"

    def test_reference_mode_keeps_escape(self):
        assert expand_word(expander({}), "\\+foo", keep_reference_escape=True) == "\\+foo"

    def test_literal_mode_restores_marker(self):
        assert expand_word(expander({}), "\\+foo", keep_reference_escape=False) == "+foo"

    def test_variables_expanded(self):
        assert expand_word(expander({"V": "1"}), "img:$V", keep_reference_escape=False) == "img:1"

    def test_double_backslash_limitation(self):
        """An already doubled backslash before the marker is not preserved."""
        assert expand_word(expander({}), "\\\\+", keep_reference_escape=False) == "+"
        assert expand_word(expander({}), "\\\\+", keep_reference_escape=True) == "\\+"

    def test_variable_names(self):
        assert is_valid_variable_name("A_1")
        assert is_valid_variable_name("_private")
        assert not is_valid_variable_name("1A")
        assert not is_valid_variable_name("A-B")
        assert not is_valid_variable_name("")

    def test_line_continuations(self):
        assert remove_line_continuations("a\\\n    b") == "ab"
        assert remove_line_continuations("a\\\r\n\tb") == "ab"


class TestReferences:
    def test_local_internal_target(self):
        ref = parse_target("+build")
        assert ref.name == "build"
        assert ref.is_local_internal
        assert str(ref) == "+build"

    def test_local_directory_target(self):
        ref = parse_target("./services/api+image")
        assert ref.local_path == "./services/api"
        assert not ref.is_remote

    def test_remote_target_with_tag(self):
        ref = parse_target("github.com/org/repo:v1.2+build")
        assert (ref.import_ref, ref.tag, ref.name) == ("github.com/org/repo", "v1.2", "build")
        assert ref.is_remote
        assert str(ref) == "github.com/org/repo:v1.2+build"

    def test_registry_port_is_not_a_tag(self):
        ref = parse_target("localhost:5000/org/repo+build")
        assert ref.import_ref == "localhost:5000/org/repo"
        assert ref.tag == ""

    @pytest.mark.parametrize("text", ["build", "+", "+-bad", "repo:+build", "\\+build"])
    def test_invalid_targets(self, text):
        with pytest.raises(InvalidReferenceError):
            parse_target(text)

    def test_artifact(self):
        artifact = parse_artifact("./lib+build/out/app")
        assert artifact.target.name == "build"
        assert artifact.target.local_path == "./lib"
        assert artifact.path == "out/app"
        assert str(artifact) == "./lib+build/out/app"

    @pytest.mark.parametrize("text", ["+build", "+build/", "+/path", "plain/path", "file\\+x/y"])
    def test_invalid_artifacts(self, text):
        with pytest.raises(InvalidReferenceError):
            parse_artifact(text)


class TestPlatforms:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("linux/amd64", PlatformSpec("linux", "amd64")),
            ("linux/arm64/v8", PlatformSpec("linux", "arm64")),
            ("linux/arm", PlatformSpec("linux", "arm", "v7")),
            ("linux/armhf", PlatformSpec("linux", "arm", "v7")),
            ("linux/x86_64", PlatformSpec("linux", "amd64")),
            ("x86_64", PlatformSpec("linux", "amd64")),
            ("aarch64", PlatformSpec("linux", "arm64")),
            ("darwin", PlatformSpec("darwin", "amd64")),
            ("macos/arm64", PlatformSpec("darwin", "arm64")),
            ("Linux/AMD64", PlatformSpec("linux", "amd64")),
        ],
    )
    def test_parse(self, text, expected):
        assert parse_platform(text) == expected

    @pytest.mark.parametrize("text", ["", "linux/*", "bogus", "linux/amd64/v2/extra", "linux//amd64"])
    def test_invalid(self, text):
        with pytest.raises(InvalidPlatformError):
            parse_platform(text)

    def test_format(self):
        assert str(PlatformSpec("linux", "arm", "v7")) == "linux/arm/v7"
        assert str(PlatformSpec("windows", "amd64")) == "windows/amd64"


class TestTemplating:
    SCOPE = {"A": "val", "EMPTY": ""}

    @pytest.mark.parametrize(
        "word, expected",
        [
            ("$A", "val"),
            ("${A}x", "valx"),
            ("pre-$A-post", "pre-val-post"),
            ("$MISSING", ""),
            ("${MISSING:-fallback}", "fallback"),
            ("${EMPTY:-fallback}", "fallback"),
            ("${A:-fallback}", "val"),
            ("${A:+alt}", "alt"),
            ("${MISSING:+alt}", ""),
            ("'$A'", "$A"),
            ('"$A and more"', "val and more"),
            ('"say \\"hi\\""', 'say "hi"'),
            ("\\$A", "$A"),
            ("cost$", "cost$"),
            ("${MISSING:-${A}}", "val"),
            ("${MISSING:-${EMPTY:-deep}}", "deep"),
            ("${A:+[${A}]}", "[val]"),
            ("${MISSING:+${A}}", ""),
        ],
    )
    def test_expand(self, word, expected):
        assert render_template(word, self.SCOPE) == expected

    @pytest.mark.parametrize("word", ["${A", "${A:-${B}", "${A:?oops}", "${1}", "'open", '"open'])
    def test_errors(self, word):
        with pytest.raises(ExpansionError):
            render_template(word, self.SCOPE)
