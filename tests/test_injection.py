"""Tests for injection template parsing and application."""

import pytest

from mergegen.errors import (
    AmbiguousMatchError,
    BadPatternError,
    MissingGroupError,
    NoMatchError,
)
from mergegen.injection.applier import InjectionOutcome, apply_all, apply_injection
from mergegen.injection.parser import compile_pattern, parse_injection

TARGET = "#include <iostream>\n\nint main()\n{\n    return 0;\n}\n"


def block(name: str, pattern: str, payload: str) -> str:
    return (
        f"<!-- injection-pattern: {name} -->\n"
        f"{pattern}\n"
        "<!-- injection-string-start -->\n"
        f"{payload}"
        "<!-- injection-string-end -->\n"
    )


class TestParseInjection:
    def test_parses_single_block(self):
        (spec,) = parse_injection(block("hdr", r"(?P<injection>#include <iostream>\n)", "#include <vector>\n"))
        assert spec.pattern_name == "hdr"
        assert spec.regex.pattern == r"(?P<injection>#include <iostream>\n)"
        assert spec.payload == "#include <vector>\n"

    def test_parses_multiple_blocks_in_order(self):
        text = block("one", "(?P<injection>a)", "1\n") + "\n" + block("two", "(?P<injection>b)", "2\n")
        specs = parse_injection(text)
        assert [s.pattern_name for s in specs] == ["one", "two"]
        assert [s.payload for s in specs] == ["1\n", "2\n"]

    def test_multiline_payload(self):
        (spec,) = parse_injection(block("p", "(?P<injection>x)", "line 1\n    line 2\n"))
        assert spec.payload == "line 1\n    line 2\n"

    def test_inline_payload(self):
        text = (
            "<!-- injection-pattern: inline -->\n(?P<injection>x)\n"
            "<!-- injection-string-start -->, y<!-- injection-string-end -->\n"
        )
        (spec,) = parse_injection(text)
        assert spec.payload == ", y"

    def test_no_block_is_bad_pattern(self):
        with pytest.raises(BadPatternError):
            parse_injection("nothing to see here\n")

    def test_missing_start_marker(self):
        with pytest.raises(BadPatternError):
            parse_injection("<!-- injection-pattern: p -->\n(?P<injection>x)\n")

    def test_missing_end_marker(self):
        text = "<!-- injection-pattern: p -->\n(?P<injection>x)\n<!-- injection-string-start -->\nbody\n"
        with pytest.raises(BadPatternError):
            parse_injection(text)

    def test_invalid_regex(self):
        with pytest.raises(BadPatternError) as exc_info:
            parse_injection(block("bad", "(?P<injection>[unclosed", "x\n"), path="t.inj")
        assert exc_info.value.kind == "bad_pattern"

    def test_empty_regex(self):
        with pytest.raises(BadPatternError):
            parse_injection(block("empty", "", "x\n"))

    def test_group_with_other_name(self):
        with pytest.raises(MissingGroupError):
            parse_injection(block("p", "(?P<insert>x)", "y\n"))

    def test_unnamed_group(self):
        with pytest.raises(MissingGroupError):
            compile_pattern("p", "(x)")

    def test_extra_capture_group(self):
        with pytest.raises(MissingGroupError):
            compile_pattern("p", "(a)(?P<injection>b)")

    def test_non_capturing_groups_allowed(self):
        regex = compile_pattern("p", "(?:a|b)(?P<injection>c)")
        assert regex.groupindex == {"injection": 1}


class TestApplyInjection:
    def spec(self, pattern, payload):
        (spec,) = parse_injection(block("t", pattern, payload))
        return spec

    def test_inserts_after_captured_span(self):
        spec = self.spec(r"(?P<injection>#include <iostream>\n)", "#include <vector>\n")
        patched, outcome = apply_injection(TARGET, spec)
        assert outcome is InjectionOutcome.INJECTED
        assert patched.startswith("#include <iostream>\n#include <vector>\n\nint main()")

    def test_second_application_is_noop(self):
        spec = self.spec(r"(?P<injection>#include <iostream>\n)", "#include <vector>\n")
        once, _ = apply_injection(TARGET, spec)
        twice, outcome = apply_injection(once, spec)
        assert outcome is InjectionOutcome.NOOP
        assert twice == once

    def test_payload_inside_capture_is_noop(self):
        spec = self.spec(r"(?P<injection>\{\n(?:    .*\n)*)", "    return 0;\n")
        patched, outcome = apply_injection(TARGET, spec)
        assert outcome is InjectionOutcome.NOOP
        assert patched == TARGET

    def test_zero_width_capture(self):
        spec = self.spec(r"int main\(\)\n\{\n(?P<injection>)", "    init();\n")
        patched, outcome = apply_injection(TARGET, spec)
        assert outcome is InjectionOutcome.INJECTED
        assert "{\n    init();\n    return 0;\n" in patched

    def test_pattern_matching_its_own_payload_is_idempotent(self):
        spec = self.spec(r"(?P<injection>#include <[a-z]+>\n)", "#include <vector>\n")
        once, outcome = apply_injection(TARGET, spec)
        assert outcome is InjectionOutcome.INJECTED
        twice, outcome = apply_injection(once, spec)
        assert outcome is InjectionOutcome.NOOP
        assert twice == once

    def test_trailing_context_pattern_is_idempotent(self):
        spec = self.spec(r"\{\n(?P<injection>)    return 0;", "    init();\n")
        once, outcome = apply_injection(TARGET, spec)
        assert outcome is InjectionOutcome.INJECTED
        assert "{\n    init();\n    return 0;" in once
        twice, outcome = apply_injection(once, spec)
        assert outcome is InjectionOutcome.NOOP
        assert twice == once

    def test_payload_elsewhere_still_injects(self):
        content = "#include <vector>\n\n" + TARGET
        spec = self.spec(r"(?P<injection>#include <iostream>\n)", "#include <vector>\n")
        patched, outcome = apply_injection(content, spec)
        assert outcome is InjectionOutcome.INJECTED
        assert patched.count("#include <vector>\n") == 2

    def test_no_match(self):
        spec = self.spec(r"(?P<injection>#include <map>\n)", "x\n")
        with pytest.raises(NoMatchError) as exc_info:
            apply_injection(TARGET, spec, path="main.cpp")
        assert "main.cpp" in str(exc_info.value)

    def test_ambiguous_match_rejected(self):
        spec = self.spec(r"(?P<injection>\n)", "x\n")
        with pytest.raises(AmbiguousMatchError):
            apply_injection(TARGET, spec)

    def test_optional_group_not_participating(self):
        spec = self.spec(r"int main\(\)(?P<injection>X)?", "x")
        with pytest.raises(NoMatchError):
            apply_injection(TARGET, spec)

    def test_apply_all_reports_injected_if_any_changed(self):
        specs = parse_injection(
            block("first", r"(?P<injection>#include <iostream>\n)", "#include <vector>\n")
            + block("second", r"(?P<injection>    return 0;\n)", "")
        )
        patched, outcome = apply_all(TARGET, specs)
        assert outcome is InjectionOutcome.INJECTED
        assert "#include <vector>" in patched

    def test_apply_all_noop_when_everything_in_place(self):
        specs = parse_injection(block("h", r"(?P<injection>#include <iostream>\n)", "#include <vector>\n"))
        once, _ = apply_all(TARGET, specs)
        again, outcome = apply_all(once, specs)
        assert outcome is InjectionOutcome.NOOP
        assert again == once
