"""Documentation section extraction tests."""

import textwrap

import pytest

from doclink.errors import DuplicateDocIdError
from doclink.markdown import tokenize
from doclink.sections import (
    DefinitionShape,
    ListShape,
    TableShape,
    extract_arguments,
    parse_markdown,
    parse_term,
)


def _parse(text, marker="@docs-id"):
    return parse_markdown(textwrap.dedent(text).lstrip("\n"), "docs/api.md", marker=marker)


def _names(section):
    return [a.name for a in section.args]


class TestParseTerm:
    def test_backticked_name_and_type(self):
        arg = parse_term("`username` (`string`): The user name")
        assert (arg.name, arg.type_token, arg.description) == ("username", "string", "The user name")

    def test_inline_type_after_colon(self):
        arg = parse_term("password: string: the password")
        assert (arg.name, arg.type_token, arg.description) == ("password", "string", "the password")

    def test_untyped(self):
        arg = parse_term("name: the display name")
        assert arg.type_token is None
        assert arg.description == "the display name"

    def test_dash_delimiters(self):
        assert parse_term("count (int) - how many").type_token == "int"
        assert parse_term("count — how many").name == "count"
        assert parse_term("count – how many").description == "how many"

    def test_markup_stripped_from_name(self):
        assert parse_term("**limit**: max rows").name == "limit"
        assert parse_term("`...args`: the rest").name == "args"
        assert parse_term("`opts?`: options").name == "opts"

    def test_prose_is_not_a_term(self):
        assert parse_term("This endpoint logs a user in.") is None
        assert parse_term("`two words`: nope") is None

    def test_description_required_when_asked(self):
        assert parse_term("name:", require_description=True) is None
        assert parse_term("name:") is not None


class TestTableShape:
    """Header columns resembling Param / Type / Description."""

    def test_extracts_rows(self):
        (section,) = _parse(
            """
            <!-- @docs-id: auth-login -->
            ## Login

            | Param | Type | Description |
            |-------|------|-------------|
            | `username` | `string` | The user name |
            | password | string | The password |
            """
        )
        assert section.shape == "table"
        assert _names(section) == ["username", "password"]
        assert [a.type_token for a in section.args] == ["string", "string"]
        assert section.args[0].description == "The user name"

    def test_header_variants(self):
        blocks = tokenize("| Argument | Meaning |\n|:--|--:|\n| id | the id |\n")
        args = TableShape().extract(blocks)
        assert [a.name for a in args] == ["id"]
        assert args[0].type_token is None

    def test_requires_name_column(self):
        blocks = tokenize("| Status | Meaning |\n|---|---|\n| 200 | ok |\n")
        assert TableShape().extract(blocks) == []

    def test_requires_separator_row(self):
        blocks = tokenize("| Param | Type |\n| id | int |\n")
        assert TableShape().extract(blocks) == []


class TestListShape:
    def test_all_items_must_parse(self):
        blocks = tokenize("- `id` (`int`): the id\n- just some prose here\n")
        assert ListShape().extract(blocks) == []

    def test_mixed_item_forms(self):
        (section,) = _parse(
            """
            <!-- @docs-id: users-create -->
            ## Create user

            - `name` (`string`): display name
            - email: string: contact address
            - tenant_id (uuid): owning tenant
            """
        )
        assert section.shape == "list"
        assert _names(section) == ["name", "email", "tenant_id"]
        assert [a.type_token for a in section.args] == ["string", "string", "uuid"]


class TestDefinitionShape:
    def test_caption_skipped(self):
        (section,) = _parse(
            """
            <!-- @docs-id: auth-login -->
            ## Login

            Parameters:
            username (string): The name
            password - The password
            """
        )
        assert section.shape == "definition"
        assert _names(section) == ["username", "password"]
        assert section.args[1].description == "The password"

    def test_prose_paragraph_ignored(self):
        blocks = tokenize("Logs a user in and returns a session.\n")
        assert DefinitionShape().extract(blocks) == []

    def test_single_bare_term_is_prose(self):
        (section,) = _parse(
            """
            <!-- @docs-id: health -->
            ## Health check

            Returns: 200 when the service is up.
            """
        )
        assert section.args == []
        assert section.shape is None

    def test_single_backticked_or_typed_term(self):
        assert [a.name for a in DefinitionShape().extract(tokenize("`verbose`: log more\n"))] == ["verbose"]
        args = DefinitionShape().extract(tokenize("limit (int): max rows\n"))
        assert [(a.name, a.type_token) for a in args] == [("limit", "int")]

    def test_single_bare_term_under_caption(self):
        args = DefinitionShape().extract(tokenize("Parameters:\nlimit: max rows\n"))
        assert [a.name for a in args] == ["limit"]


class TestShapePriority:
    """Shapes are tried Table, List, Definition; first non-empty wins."""

    def test_table_wins_over_list(self):
        (section,) = _parse(
            """
            <!-- @docs-id: auth-login -->
            ## Login

            - `user`: listed first in the document

            | Param | Type | Description |
            |---|---|---|
            | username | string | From the table |
            """
        )
        assert section.shape == "table"
        assert _names(section) == ["username"]

    def test_list_wins_over_definition(self):
        blocks = tokenize("a: from paragraph\n\n- b: from list\n")
        args, shape = extract_arguments(blocks)
        assert shape == "list"
        assert [a.name for a in args] == ["b"]

    def test_no_argument_block_is_legal(self):
        (section,) = _parse(
            """
            <!-- @docs-id: health -->
            ## Health check

            Returns 200 when the service is up.
            """
        )
        assert section.args == []
        assert section.shape is None


class TestSections:
    def test_section_runs_to_next_marker(self):
        first, second = _parse(
            """
            <!-- @docs-id: a -->
            ## First

            - x: one

            <!-- @docs-id: b -->
            ## Second

            - y: two
            """
        )
        assert (first.id, first.title, _names(first)) == ("a", "First", ["x"])
        assert (second.id, second.title, _names(second)) == ("b", "Second", ["y"])
        assert (first.line, second.line) == (1, 6)
        assert first.file == "docs/api.md"

    def test_title_is_optional(self):
        (section,) = _parse("<!-- @docs-id: bare -->\nSome text.\n")
        assert section.title is None
        assert section.display_title == "bare"

    def test_content_before_first_marker_ignored(self):
        (section,) = _parse("# Intro\n\n- z: ignored\n\n<!-- @docs-id: a -->\n## A\n")
        assert section.args == []
        assert section.title == "A"

    def test_other_html_comments_do_not_open_sections(self):
        sections = _parse("<!-- TODO: write docs -->\n## Heading\n")
        assert sections == []

    def test_custom_marker(self):
        sections = _parse("<!-- @api: login -->\n## Login\n", marker="@api")
        assert [s.id for s in sections] == ["login"]

    def test_empty_id_ignored(self):
        assert _parse("<!-- @docs-id:   -->\n## Nothing\n") == []

    def test_duplicate_id_raises(self):
        with pytest.raises(DuplicateDocIdError) as exc:
            _parse("<!-- @docs-id: a -->\n## One\n\n<!-- @docs-id: a -->\n## Two\n")
        assert exc.value.doc_id == "a"
        assert (exc.value.first_line, exc.value.line) == (1, 4)
        assert "docs/api.md" in str(exc.value)
