from __future__ import annotations

import pytest
from errcode_audit.checks.explanations import scan_explanation
from errcode_audit.checks.model import Findings, is_error_code
from errcode_audit.checks.registry import extract_error_codes
from errcode_audit.checks.usage import find_error_codes
from helpers import registry_text
from hypothesis import given
from hypothesis import strategies as st

codes = st.from_regex(r"[A-Z][0-9]{4}", fullmatch=True)


@pytest.mark.unit
@given(codes)
def test_generated_codes_are_well_formed(code: str) -> None:
    assert is_error_code(code)
    assert not is_error_code(code.lower())
    assert not is_error_code(code + "0")


@pytest.mark.unit
@given(st.lists(codes, min_size=1, max_size=12))
def test_registry_keeps_first_declaration_and_flags_repeats(declared: list[str]) -> None:
    registry, findings = extract_error_codes(registry_text(declared), Findings())
    assert list(registry.codes) == list(dict.fromkeys(declared))
    assert registry.highest == max(declared)
    duplicates = [f for f in findings if f.rule == "ERRCODE_DUPLICATE"]
    assert len(duplicates) == len(declared) - len(set(declared))
    assert len(findings) == len(duplicates)


@pytest.mark.unit
@given(codes, st.sampled_from(["f({c}, a)", "f(a, {c})", "f(a, {c}, b)", '#[error = "{c}"]', "f(\t{c})"]))
def test_delimited_codes_are_found(code: str, template: str) -> None:
    assert find_error_codes("    " + template.format(c=code)) == [code]


@pytest.mark.unit
@given(codes, st.text(alphabet=st.characters(blacklist_categories=("Cc", "Cs")), max_size=40))
def test_comment_lines_never_yield_codes(code: str, tail: str) -> None:
    assert find_error_codes(f"   // f({code}, a) {tail}") == []


@pytest.mark.unit
@given(codes, st.sampled_from(["compile_fail,{c}", "compile_fail,edition2021,{c}", "{c},compile_fail"]))
def test_compile_fail_fence_naming_code_counts_as_negative_test(code: str, header: str) -> None:
    facts = scan_explanation(f"Erroneous example:\n\n```{header.format(c=code)}\nbad();\n```\n", code)
    assert facts.has_code_example
    assert facts.has_valid_negative_test
    assert not facts.uses_ignore_marker
    assert not facts.no_longer_emitted
