"""Type normalization tests."""

import pytest

from doclink.types import CanonicalType, build_alias_table, normalize, types_conflict


class TestNormalize:
    """Raw tokens from code and docs reduce to a small canonical set."""

    @pytest.mark.parametrize(
        "token, expected",
        [
            ("String", CanonicalType.STRING),
            ("&str", CanonicalType.STRING),
            ("`text`", CanonicalType.STRING),
            ("  VARCHAR ", CanonicalType.STRING),
            ("character   varying", CanonicalType.STRING),
            ("uuid", CanonicalType.STRING),
            ("Integer", CanonicalType.NUMBER),
            ("i64", CanonicalType.NUMBER),
            ("int4", CanonicalType.NUMBER),
            ("f32", CanonicalType.NUMBER),
            ("bool", CanonicalType.BOOLEAN),
            ("jsonb", CanonicalType.OBJECT),
            ("HashMap", CanonicalType.OBJECT),
        ],
    )
    def test_builtin_aliases(self, token, expected):
        assert normalize(token) is expected

    @pytest.mark.parametrize(
        "token, expected",
        [
            ("Optional[int]", CanonicalType.NUMBER),
            ("str | None", CanonicalType.STRING),
            ("None | str", CanonicalType.STRING),
            ("Option<String>", CanonicalType.STRING),
            ("number?", CanonicalType.NUMBER),
            ("string | undefined", CanonicalType.STRING),
        ],
    )
    def test_optional_wrappers_unwrapped(self, token, expected):
        assert normalize(token) is expected

    def test_unknown_tokens(self):
        assert normalize("Vec<u8>") is CanonicalType.UNKNOWN
        assert normalize("MyCustomType") is CanonicalType.UNKNOWN

    def test_absent_or_empty_token_is_unknown(self):
        assert normalize(None) is CanonicalType.UNKNOWN
        assert normalize("") is CanonicalType.UNKNOWN
        assert normalize("   ") is CanonicalType.UNKNOWN

    @pytest.mark.parametrize("token", ["String", "&str", "i64", "Optional[int]", "Vec<u8>", "jsonb", "bool"])
    def test_idempotent(self, token):
        once = normalize(token)
        assert normalize(once) is once
        assert normalize(once.value) is once


class TestAliasTable:
    """Configured aliases extend and override the built-in table."""

    def test_extends(self):
        table = build_alias_table({"Email": "string"})
        assert normalize("email", table) is CanonicalType.STRING
        assert normalize("Email", table) is CanonicalType.STRING

    def test_overrides_builtin(self):
        table = build_alias_table({"json": CanonicalType.STRING})
        assert normalize("json", table) is CanonicalType.STRING
        assert normalize("json") is CanonicalType.OBJECT

    def test_does_not_mutate_builtins(self):
        build_alias_table({"Money": "number"})
        assert normalize("money") is CanonicalType.UNKNOWN

    def test_rejects_unknown_canonical_name(self):
        with pytest.raises(ValueError):
            build_alias_table({"Email": "text"})


class TestTypesConflict:
    def test_different_canonical_types_conflict(self):
        assert types_conflict("string", "Integer")

    def test_same_canonical_type_does_not_conflict(self):
        assert not types_conflict("&str", "text")
        assert not types_conflict("i32", "number")

    def test_unknown_never_conflicts(self):
        assert not types_conflict("Vec<u8>", "string")
        assert not types_conflict("string", "Whatever")

    def test_missing_side_never_conflicts(self):
        assert not types_conflict(None, "int")
        assert not types_conflict("int", None)
