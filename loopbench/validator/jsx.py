"""
JSX Validator — статическая проверка сгенерированного React/JSX кода

Порядок проверок строгий:
1. Разбор как ES-модуля с JSX (грамматика tree-sitter-javascript)
   и сверка имён открывающих и закрывающих тегов.
   Ошибка разбора → единственная ошибка SYNTAX_ERROR, дальше не проверяем:
   по неразобранному документу шаблоны дают шум.
2. Четыре структурные проверки по исходному тексту:
   - href="#..." (ломает навигацию в песочнице предпросмотра)
   - <button ...> закрыт </a>
   - <a ...> закрыт </button>
   - два class/className подряд на одном элементе

Использование:
    from loopbench.validator.jsx import validate_jsx

    result = validate_jsx('<button onClick={f}>X</a>')
    print(result.valid, result.error_types)
"""

import re
from functools import lru_cache
from typing import List, Optional

import tree_sitter_javascript as tsjavascript
from tree_sitter import Language, Node, Parser

from ..schemas.results import IssueType, ValidationIssue, ValidationResult


# Ключи checks: по одному на семейство проверок
CHECK_SYNTAX = "valid_syntax"
CHECK_HREF_HASH = "no_href_hash"
CHECK_MISMATCHED_TAGS = "no_mismatched_tags"
CHECK_DUPLICATE_ATTRS = "no_duplicate_attrs"

HREF_HASH_PATTERN = re.compile(r"""href\s*=\s*["']#[^"']*["']""")

# Ближайший закрывающий тег после <button ...>: это </a>
BUTTON_CLOSED_BY_ANCHOR = re.compile(r"<button\b[^>]*>(?:(?!</button>).)*?</a>", re.DOTALL)

# Ближайший закрывающий тег после <a ...>: это </button>
ANCHOR_CLOSED_BY_BUTTON = re.compile(r"<a\b[^>]*>(?:(?!</a>).)*?</button>", re.DOTALL)

DUPLICATE_CLASS_PATTERN = re.compile(
    r"""\b(?:className|class)\s*=\s*["'][^"']*["']\s+(?:className|class)\s*=\s*["'][^"']*["']"""
)

# HTML-имена атрибутов, которые грамматика считает зарезервированными словами.
# Подменяются идентификатором той же длины, позиции ошибок не сдвигаются.
RESERVED_ATTRIBUTE_PATTERN = re.compile(r"""(?<=\s)(class|for)(?=\s*=\s*["'{])""")
RESERVED_ATTRIBUTE_STANDINS = {"class": "klass", "for": "fr_"}

# Пары open/close, которые разбирают шаблонные проверки MISMATCHED_TAGS
PATTERN_CHECKED_MISMATCHES = frozenset([("button", "a"), ("a", "button")])

SYNTAX_FIX_HINT = "Fix the syntax error - check for missing brackets, quotes, or semicolons."
MATCHING_TAGS_FIX = "Use matching tags: <button onClick={handleClick}>Text</button>"


@lru_cache(maxsize=1)
def _get_parser() -> Parser:
    return Parser(Language(tsjavascript.language()))


def _find_first_error(root: Node) -> Optional[Node]:
    """Первый (в порядке документа) узел ERROR или MISSING"""
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_error or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


def _tag_name(tag: Optional[Node]) -> str:
    """Имя тега; пустая строка для фрагмента <>...</>"""
    if tag is None:
        return ""
    name = tag.child_by_field_name("name")
    return name.text.decode("utf-8") if name is not None else ""


def _find_mismatched_closing_tag(root: Node) -> Optional[str]:
    """
    Грамматика не сверяет имена открывающего и закрывающего тегов.
    Первое несовпадение в порядке документа, кроме пар button/a.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "jsx_element":
            opened = _tag_name(node.child_by_field_name("open_tag"))
            close_tag = node.child_by_field_name("close_tag")
            closed = _tag_name(close_tag)
            pair = (opened, closed)
            if close_tag is not None and opened != closed and pair not in PATTERN_CHECKED_MISMATCHES:
                line, column = close_tag.start_point[0] + 1, close_tag.start_point[1] + 1
                return (
                    f"expected </{opened}> but found </{closed}> "
                    f"at line {line}, column {column}"
                )
        stack.extend(reversed(node.children))
    return None


def find_syntax_error(code: str) -> Optional[str]:
    """
    Разобрать код и вернуть описание первой синтаксической ошибки

    Returns:
        None если код разобран без ошибок
    """
    source = RESERVED_ATTRIBUTE_PATTERN.sub(
        lambda m: RESERVED_ATTRIBUTE_STANDINS[m.group(1)], code
    )
    tree = _get_parser().parse(source.encode("utf-8"))
    root = tree.root_node
    if not root.has_error:
        return _find_mismatched_closing_tag(root)

    node = _find_first_error(root) or root
    line, column = node.start_point[0] + 1, node.start_point[1] + 1
    if node.is_missing:
        return f"missing '{node.type}' at line {line}, column {column}"
    return f"unexpected token at line {line}, column {column}"


def _check_href_hash(code: str) -> List[ValidationIssue]:
    if not HREF_HASH_PATTERN.search(code):
        return []
    return [ValidationIssue(
        type=IssueType.NAVIGATION_ERROR,
        message='href="#" causes page reload in Sandpack. Use button with onClick instead.',
        fix="Replace <a href=\"#\"> with: <button onClick={handleClick}>Text</button>",
    )]


def _check_button_closed_by_anchor(code: str) -> List[ValidationIssue]:
    if not BUTTON_CLOSED_BY_ANCHOR.search(code):
        return []
    return [ValidationIssue(
        type=IssueType.MISMATCHED_TAGS,
        message="Mismatched tags: <button> opened but </a> closed.",
        fix=MATCHING_TAGS_FIX,
    )]


def _check_anchor_closed_by_button(code: str) -> List[ValidationIssue]:
    if not ANCHOR_CLOSED_BY_BUTTON.search(code):
        return []
    return [ValidationIssue(
        type=IssueType.MISMATCHED_TAGS,
        message="Mismatched tags: <a> opened but </button> closed.",
        fix=MATCHING_TAGS_FIX,
    )]


def _check_duplicate_class(code: str) -> List[ValidationIssue]:
    if not DUPLICATE_CLASS_PATTERN.search(code):
        return []
    return [ValidationIssue(
        type=IssueType.DUPLICATE_ATTRIBUTE,
        message="Duplicate className attributes on same element.",
        fix='Merge into single className: className="class1 class2"',
    )]


PATTERN_CHECKS = (
    _check_href_hash,
    _check_button_closed_by_anchor,
    _check_anchor_closed_by_button,
    _check_duplicate_class,
)


def _build_checks(errors: List[ValidationIssue]) -> dict:
    """Флаги семейств; не запускавшиеся проверки считаются пройденными"""
    types = {e.type for e in errors}
    return {
        CHECK_SYNTAX: IssueType.SYNTAX_ERROR not in types and IssueType.EMPTY_CODE not in types,
        CHECK_HREF_HASH: IssueType.NAVIGATION_ERROR not in types,
        CHECK_MISMATCHED_TAGS: IssueType.MISMATCHED_TAGS not in types,
        CHECK_DUPLICATE_ATTRS: IssueType.DUPLICATE_ATTRIBUTE not in types,
    }


def validate_jsx(code: str) -> ValidationResult:
    """
    Проверить JSX/React код

    Args:
        code: Текст кода (уже без markdown-обрамления)

    Returns:
        ValidationResult; valid == (errors пуст)
    """
    if not code or not code.strip():
        errors = [ValidationIssue(
            type=IssueType.EMPTY_CODE,
            message="No code generated",
            fix="Return the complete component code.",
        )]
        return ValidationResult.from_errors(errors, _build_checks(errors))

    syntax_error = find_syntax_error(code)
    if syntax_error is not None:
        errors = [ValidationIssue(
            type=IssueType.SYNTAX_ERROR,
            message=f"Syntax error: {syntax_error}",
            fix=SYNTAX_FIX_HINT,
        )]
        return ValidationResult.from_errors(errors, _build_checks(errors))

    errors: List[ValidationIssue] = []
    for check in PATTERN_CHECKS:
        errors.extend(check(code))

    return ValidationResult.from_errors(errors, _build_checks(errors))
