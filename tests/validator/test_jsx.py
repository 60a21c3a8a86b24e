"""Tests for the JSX validator."""

from loopbench.schemas import IssueType
from loopbench.validator import (
    CHECK_DUPLICATE_ATTRS,
    CHECK_HREF_HASH,
    CHECK_MISMATCHED_TAGS,
    CHECK_SYNTAX,
    find_syntax_error,
    validate_jsx,
)

VALID_COMPONENT = """
import { useState } from 'react';

export default function Navbar() {
  const [open, setOpen] = useState(false);
  return (
    <nav className="flex items-center justify-between p-4">
      <span className="font-bold">Logo</span>
      <button onClick={() => setOpen(!open)}>Menu</button>
      {open && (
        <ul>
          <li><button onClick={() => setOpen(false)}>Home</button></li>
        </ul>
      )}
    </nav>
  );
}
"""


def _types(result) -> list:
    return [e.type for e in result.errors]


class TestValidCode:
    def test_valid_component_passes_every_check(self) -> None:
        result = validate_jsx(VALID_COMPONENT)

        assert result.valid is True
        assert result.errors == []
        assert result.checks == {
            CHECK_SYNTAX: True,
            CHECK_HREF_HASH: True,
            CHECK_MISMATCHED_TAGS: True,
            CHECK_DUPLICATE_ATTRS: True,
        }

    def test_find_syntax_error_returns_none_for_valid_code(self) -> None:
        assert find_syntax_error(VALID_COMPONENT) is None


class TestSyntaxShortCircuit:
    def test_unbalanced_braces_yield_exactly_one_syntax_error(self) -> None:
        code = 'export default function Nav() {\n  return (<a href="#">x</a>\n'

        result = validate_jsx(code)

        assert result.valid is False
        assert _types(result) == [IssueType.SYNTAX_ERROR]
        assert result.errors[0].message.startswith("Syntax error:")
        assert "line" in result.errors[0].message

    def test_unclosed_tag_yields_only_syntax_error(self) -> None:
        code = "const App = () => (\n  <div className=\"a\" className=\"b\">\n    <button>Click\n  </div>\n);\n"

        result = validate_jsx(code)

        assert _types(result) == [IssueType.SYNTAX_ERROR]

    def test_skipped_checks_are_reported_as_passed(self) -> None:
        result = validate_jsx("function broken( {")

        assert result.checks[CHECK_SYNTAX] is False
        assert result.checks[CHECK_HREF_HASH] is True
        assert result.checks[CHECK_MISMATCHED_TAGS] is True
        assert result.checks[CHECK_DUPLICATE_ATTRS] is True

    def test_mismatched_closing_tag_is_a_syntax_error(self) -> None:
        result = validate_jsx("const A = () => <div>x</span>;")

        assert _types(result) == [IssueType.SYNTAX_ERROR]
        assert "expected </div> but found </span>" in result.errors[0].message

    def test_nested_mismatch_is_found(self) -> None:
        code = "const A = () => (\n  <nav>\n    <ul><li>Home</ul></li>\n  </nav>\n);\n"

        result = validate_jsx(code)

        assert _types(result) == [IssueType.SYNTAX_ERROR]
        assert "line 3" in result.errors[0].message

    def test_fragments_and_member_tags_match(self) -> None:
        code = "const A = () => (<><Nav.Item>Home</Nav.Item></>);"

        assert validate_jsx(code).valid is True


class TestHtmlAttributeNames:
    def test_single_class_attribute_is_valid(self) -> None:
        result = validate_jsx('const A = () => <div class="a">x</div>;')

        assert result.valid is True
        assert result.checks[CHECK_SYNTAX] is True

    def test_label_for_attribute_is_valid(self) -> None:
        code = 'const A = () => (<form><label for="email">Email</label><input id="email" /></form>);'

        assert validate_jsx(code).valid is True

    def test_duplicate_class_is_not_masked_by_syntax(self) -> None:
        result = validate_jsx('const A = () => <div class="a" class="b">x</div>;')

        assert _types(result) == [IssueType.DUPLICATE_ATTRIBUTE]

    def test_real_syntax_error_is_still_reported_next_to_class(self) -> None:
        message = find_syntax_error('const A = () => <div class="a">{</div>;')

        assert message is not None
        assert "line 1" in message


class TestPatternChecks:
    def test_button_closed_by_anchor_is_a_tag_mismatch(self) -> None:
        result = validate_jsx("<button onClick={f}>X</a>")

        assert IssueType.MISMATCHED_TAGS in _types(result)
        assert IssueType.SYNTAX_ERROR not in _types(result)
        assert "<button> opened but </a> closed" in result.errors[0].message
        assert result.checks[CHECK_MISMATCHED_TAGS] is False
        assert result.checks[CHECK_SYNTAX] is True

    def test_anchor_closed_by_button_is_a_tag_mismatch(self) -> None:
        result = validate_jsx('const Link = () => <a className="link">Go</button>;')

        assert _types(result) == [IssueType.MISMATCHED_TAGS]
        assert "<a> opened but </button> closed" in result.errors[0].message

    def test_matching_tags_inside_larger_markup_are_fine(self) -> None:
        code = "const A = () => (<div><button onClick={f}>X</button><a href=\"/about\">About</a></div>);"

        assert validate_jsx(code).valid is True

    def test_href_hash_is_a_navigation_error(self) -> None:
        result = validate_jsx('const A = () => <a href="#home">Home</a>;')

        assert _types(result) == [IssueType.NAVIGATION_ERROR]
        assert result.checks[CHECK_HREF_HASH] is False
        assert "onClick" in result.errors[0].fix

    def test_duplicate_class_attribute(self) -> None:
        result = validate_jsx('const A = () => <div class="a" class="b">x</div>;')

        assert IssueType.DUPLICATE_ATTRIBUTE in _types(result)
        assert result.checks[CHECK_DUPLICATE_ATTRS] is False

    def test_duplicate_classname_attribute(self) -> None:
        result = validate_jsx("const A = () => <div className='a' className='b'>x</div>;")

        assert _types(result) == [IssueType.DUPLICATE_ATTRIBUTE]

    def test_several_pattern_errors_are_all_reported_in_order(self) -> None:
        code = (
            'const A = () => (\n'
            '  <div className="x" className="y">\n'
            '    <a href="#">Home</a>\n'
            '    <button onClick={go}>About</a>\n'
            '  </div>\n'
            ');\n'
        )

        result = validate_jsx(code)

        assert _types(result) == [
            IssueType.NAVIGATION_ERROR,
            IssueType.MISMATCHED_TAGS,
            IssueType.DUPLICATE_ATTRIBUTE,
        ]
        assert result.valid is False


class TestEmptyCode:
    def test_blank_code_is_a_single_empty_code_error(self) -> None:
        result = validate_jsx("   \n ")

        assert _types(result) == [IssueType.EMPTY_CODE]
        assert result.checks[CHECK_SYNTAX] is False

    def test_valid_always_matches_errors(self) -> None:
        for code in ["", VALID_COMPONENT, "<button>X</a>", "let = ;"]:
            result = validate_jsx(code)
            assert result.valid == (len(result.errors) == 0)
